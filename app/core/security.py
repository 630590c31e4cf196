def redact_user(user_id: str | None) -> str:
    """
    Redact a user id for logging purposes.
    Shows the first 6 characters followed by ***.
    """
    if not user_id:
        return "None"
    if len(user_id) <= 6:
        return user_id
    return f"{user_id[:6]}***"
