class ChurchConnectError(Exception):
    status_code = 400

    def __init__(self, error, **extra):
        # extra keys, including an optional "message", are merged into the body
        super().__init__(error)
        self.message = error
        self.extra = extra

    def to_dict(self):
        return {"error": self.message, **self.extra}


class AuthenticationError(ChurchConnectError):
    status_code = 401


class UnauthorizedError(ChurchConnectError):
    status_code = 403

    def __init__(self, message="Insufficient permissions", **extra):
        super().__init__(message, **extra)


class ChurchSuspendedError(UnauthorizedError):
    def __init__(self):
        super().__init__(
            "Church account is suspended. Please contact support.", suspended=True
        )


class MissingFieldsError(ChurchConnectError):
    def __init__(self, fields):
        super().__init__("Missing required fields", missing_fields=list(fields))
        self.fields = fields


class ValidationError(ChurchConnectError):
    def __init__(self, message, details=None):
        extra = {"details": details} if details is not None else {}
        super().__init__(message, **extra)


class NotFoundError(ChurchConnectError):
    status_code = 404


class ConflictError(ChurchConnectError):
    status_code = 409


class DuplicateCheckInError(ChurchConnectError):
    def __init__(self, message, status_code=400, **extra):
        super().__init__(message, isDuplicate=True, **extra)
        self.status_code = status_code


class FeatureNotAvailableError(ChurchConnectError):
    status_code = 403

    def __init__(self, feature, tier):
        super().__init__(
            "Feature not available",
            message=f"This feature requires a higher subscription tier. Current tier: {tier}",
            feature=feature,
            subscriptionTier=tier,
            upgradeRequired=True,
        )


class LimitExceededError(ChurchConnectError):
    status_code = 403


class PaymentError(ChurchConnectError):
    status_code = 500
