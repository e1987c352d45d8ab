import typing
from types import UnionType


def check_option_type(name: str, value: typing.Any, typeinfo: typing.Any) -> None:
    """
    Check if the provided value is an instance of typeinfo and raises a
    TypeError otherwise. This function supports only those types required for
    options and the response model: plain classes, unions, lists and dicts.
    """
    e = TypeError(f"Expected {typeinfo} for {name}, but got {type(value)}.")

    origin = typing.get_origin(typeinfo)

    if origin is typing.Union or origin is UnionType:
        for T in typing.get_args(typeinfo):
            try:
                check_option_type(name, value, T)
            except TypeError:
                pass
            else:
                return
        raise e
    elif origin is list:
        (T,) = typing.get_args(typeinfo)
        if not isinstance(value, list):
            raise e
        for v in value:
            check_option_type(name, v, T)
    elif origin is dict:
        K, V = typing.get_args(typeinfo)
        if not isinstance(value, dict):
            raise e
        for k, v in value.items():
            check_option_type(f"{name} key", k, K)
            check_option_type(f"{name}[{k!r}]", v, V)
    elif not isinstance(value, typeinfo):
        raise e
