"""Custom exceptions for the POS application."""


class PosError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        return rv


class BusinessLogicError(PosError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)


class NotFoundError(PosError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class BillNotFound(NotFoundError):
    """Raised when a bill number does not exist."""
    def __init__(self, bill_no):
        self.bill_no = bill_no
        super().__init__("Bill not found", payload={'bill_no': bill_no})


class StorageUnavailable(PosError):
    """The database could not be reached or no pool connection was free."""
    def __init__(self, message="Storage unavailable", cause=None):
        self.cause = cause
        payload = {'error': str(cause)} if cause is not None else None
        super().__init__(message, 503, payload)


class ConstraintViolation(PosError):
    """A unique or foreign key constraint rejected the write."""
    def __init__(self, message="Constraint violation", cause=None):
        self.cause = cause
        payload = {'error': str(cause)} if cause is not None else None
        super().__init__(message, 409, payload)


class BillCreationFailed(PosError):
    """Wraps any failure raised inside the create-bill transaction."""
    def __init__(self, cause, message="Error generating bill"):
        self.cause = cause
        status_code = 503 if isinstance(cause, StorageUnavailable) else 500
        super().__init__(message, status_code, payload={'error': _describe(cause)})


class InsufficientStockError(BusinessLogicError):
    """Raised when a sale would take a product below zero stock."""
    def __init__(self, product_id, required, available):
        self.product_id = product_id
        self.required = required
        self.available = available
        message = f"Insufficient stock for {product_id}: required {required}, available {available}"
        super().__init__(message, status_code=409)


class UnauthorizedError(PosError):
    """Raised when credentials are rejected."""
    def __init__(self, message="Invalid credentials"):
        super().__init__(message, 401)


def _describe(cause):
    if isinstance(cause, PosError):
        return cause.message
    return str(cause)
