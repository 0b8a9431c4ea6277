import typing
from typing import Any, Dict, Hashable, List, Tuple, Union

Options = List[Tuple[Union[Tuple[str], Tuple[str, str]], Dict[str, Any]]]
DefaultValues = Dict[str, Any]
CommandArgs = List[str]

# Identifies one execution unit (a thread, by default its ident) in the context registry.
ExecutionUnit = Hashable
TestData = Dict[str, Any]

if hasattr(typing, "override"):  # 3.12+
    override = typing.override
else:  # <=3.11
    _F = typing.TypeVar("_F", bound=typing.Callable[..., typing.Any])

    def override(arg: _F, /) -> _F:
        """Mark a method as overriding a base class method (PEP 698 backport).

        Sets ``__override__`` on the decorated object for runtime introspection.
        """
        try:
            arg.__override__ = True
        except (AttributeError, TypeError):
            # Objects with __slots__ or builtins do not accept the attribute.
            pass
        return arg
