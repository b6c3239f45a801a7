"""Request validators.

Validators are FastAPI dependencies that bind a request, apply defaults and
enforce rules needing more than the payload itself (allowed values,
uniqueness). Structural failures surface as RequestValidationError; rule
failures as core.errors.FieldValidationError. Both become 422 responses.
"""
