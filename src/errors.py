class ContactsError(Exception):
    """Base class for errors that map to a `{success: false, message}` body."""

    status_code = 500
    message = "Something went wrong!"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(ContactsError):
    status_code = 400
    message = "First name, last name and email are required"


class NotFound(ContactsError):
    status_code = 404
    message = "Contact not found"


class CsrfError(ContactsError):
    # One message for every failure reason.
    status_code = 403
    message = "Invalid CSRF token"


class StorageError(ContactsError):
    def __init__(self, cause: BaseException):
        super().__init__(str(cause))
        self.cause = cause


class StoreInitError(Exception):
    def __init__(self, cause: BaseException):
        super().__init__(f"store initialization failed: {cause}")
        self.cause = cause


class CertificateLoadError(Exception):
    def __init__(self, cert_path: str, key_path: str, cause: BaseException):
        super().__init__(f"cannot load certificate {cert_path} / key {key_path}: {cause}")
        self.cert_path = cert_path
        self.key_path = key_path
        self.cause = cause
