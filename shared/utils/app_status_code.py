class AppStatusCode:
    DATA_RETRIEVED_SUCCESSFULLY = "100"
    OPERATION_SUCCESSFUL = "101"

    OPERATION_FAILED = "200"
    INVALID_INPUT = "201"
    RECORD_NOT_FOUND = "202"
    DUPLICATE_ADD_ERROR = "203"
    LEASE_OVERLAP = "204"
    INCOMPLETE_DATA = "205"
    STORAGE_FAILURE = "206"
    DATABASE_UNAVAILABLE = "207"
    ALREADY_PAID = "208"
    CONFLICT = "209"

    AUTHENTICATION_TOKEN_INVALID = "300"
    AUTHENTICATION_FORBIDDEN = "301"
