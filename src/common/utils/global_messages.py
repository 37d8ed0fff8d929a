class GlobalMessages:
    # Contact Messages
    CAPTCHA_FAILED = "Captcha verification failed"
    SEND_FAILED = "Unable to send message"
    MALFORMED_BODY = "Request body must be a JSON object or a form submission."
    FIELD_REQUIRED = "This field is required."
    FIELD_EMPTY = "This field cannot be empty."
    INVALID_EMAIL = "A valid email address is required."
    INVALID_DEPARTMENT = "Department must be one of: technical, admin, general, info."
    INVALID_STRING = "This field must be a string."
