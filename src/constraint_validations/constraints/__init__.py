# src/constraint_validations/constraints/
# ├─ identifiers.py   # canonical_identifier(): one normalization for catalog and error names
# ├─ catalog.py       # pg_catalog queries (PostgresConstraintCatalog)
# ├─ metadata.py      # TableConstraintMetadata + build_constraint_metadata()
# ├─ messages.py      # default messages + build_message_table()
# ├─ classifier.py    # classify(): violation + metadata -> field(s) and category
# ├─ assembler.py     # assemble()/convert_violation(): ValidationFailure or Reraise
# └─ binding.py       # TableBinding: source + snapshot + messages
