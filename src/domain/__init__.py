"""Domain layer: business rules that do not depend on HTTP."""
