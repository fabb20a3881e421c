"""Domain Forms — concrete form definitions built from core rule tables.

Invariants:
    - Forms are declared as data (FormDefinition), never as class hierarchies
    - Every shipped form is registered explicitly in product_form.FORMS
"""
