def not_none[T](value: T | None, value_name: str | None = None) -> T:
    value_name_str = f" '{value_name}'" if value_name else ""
    if value is None:
        raise ValueError(f"Value{value_name_str} is None, which is unexpected")
    return value


def truncate(text: str, max_length: int, suffix: str = "...") -> str:
    """Cut `text` to `max_length` characters, marking the cut with `suffix`"""
    if len(text) > max_length:
        return text[:max_length] + suffix
    return text
