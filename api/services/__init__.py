"""Service layer for business logic.

Services encapsulate all business logic, keeping routes thin and focused
on HTTP handling.

Layer hierarchy:
    Routes (HTTP) -> Services (Business Logic) -> Rendering (HTML, QR, PDF)

Services should:
- Contain all business rules and validation
- Orchestrate the rendering modules
- Raise domain exceptions (routes map them to status codes)

Services should NOT:
- Know about HTTP request/response details
"""
