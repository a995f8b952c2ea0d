"""
Service layer.

Each service encapsulates the business logic of one resource.  Services
take an explicit ``Identity`` where a resource is ownership scoped,
talk to the database only through ``core.db`` and signal failures by
raising ``core.errors.ServiceError`` subclasses; they never build HTTP
responses.
"""
