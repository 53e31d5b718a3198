class AppStatusCode:
    """Application level status codes carried in every response envelope."""

    # Success
    DATA_RETRIEVED_SUCCESSFULLY = "100"
    CREATED_SUCCESSFULLY = "101"
    UPDATED_SUCCESSFULLY = "102"
    DELETED_SUCCESSFULLY = "103"

    # Client errors
    INVALID_INPUT = "200"
    REQUIRED_VALIDATION_ERROR = "201"
    DUPLICATE_ADD_ERROR = "202"
    NOT_FOUND = "203"
    INVALID_TRANSITION = "204"

    # Auth
    AUTHENTICATION_TOKEN_INVALID = "300"
    AUTHENTICATION_TOKEN_EXPIRED = "301"
    AUTHENTICATION_USER_FORBIDDEN = "302"

    # Server side
    OPERATION_FAILED = "400"
    OPERATION_ERROR = "401"
