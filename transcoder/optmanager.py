"""
The base implementation for Options.

Options are declared with add_option() and read and written as attributes.
Every update is type-checked and passed to OptManager.validate(). If either
fails, all values of that update are restored and the error is re-raised.
"""

from __future__ import annotations

import contextlib
import textwrap
from pathlib import Path
from typing import Any
from typing import Optional

import ruamel.yaml

from transcoder import exceptions
from transcoder.utils import typecheck

unset = object()


class _Option:
    __slots__ = ("name", "typespec", "default", "value", "help")

    def __init__(
        self,
        name: str,
        typespec: type | object,  # object for Optional[x], which is not a type.
        default: Any,
        help: str,
    ) -> None:
        typecheck.check_option_type(name, default, typespec)
        self.name = name
        self.typespec = typespec
        self.default = default
        self.value = unset
        self.help = textwrap.dedent(help).strip().replace("\n", " ")

    def __repr__(self):
        return f"{self.current()!r} [{self.typespec}]"

    def current(self) -> Any:
        return self.default if self.value is unset else self.value

    def set(self, value: Any) -> None:
        typecheck.check_option_type(self.name, value, self.typespec)
        self.value = value


class OptManager:
    def __init__(self) -> None:
        # Options must be the last attribute here - after that, we raise an
        # error for attribute assignment to unknown options.
        self._options: dict[str, _Option] = {}

    def add_option(
        self, name: str, typespec: type | object, default: Any, help: str
    ) -> None:
        self._options[name] = _Option(name, typespec, default, help)

    def validate(self, updated: set[str]) -> None:
        """
        Called after options have been updated. Subclasses may raise an
        OptionsError to reject the new values.
        """

    @contextlib.contextmanager
    def rollback(self):
        old = {name: o.value for name, o in self._options.items()}
        try:
            yield
        except (exceptions.OptionsError, TypeError):
            for name, value in old.items():
                self._options[name].value = value
            raise

    def __getattr__(self, attr):
        if attr in self.__dict__.get("_options", {}):
            return self._options[attr].current()
        raise AttributeError(f"No such option: {attr}")

    def __setattr__(self, attr, value):
        # We allow attributes to be set on the instance until we have options.
        # After that, assignment is sent to the update function.
        if not self.__dict__.get("_options"):
            super().__setattr__(attr, value)
        else:
            self.update(**{attr: value})

    def __repr__(self):
        return "{cls}({options})".format(
            cls=type(self).__name__,
            options=", ".join(f"{k}={o.current()!r}" for k, o in self._options.items()),
        )

    def update(self, **kwargs) -> None:
        """
        Raises:
            KeyError, for unknown options.
            TypeError, for values of the wrong type.
            OptionsError, if validate() rejects the new values.
        """
        unknown = [k for k in kwargs if k not in self._options]
        if unknown:
            raise KeyError("Unknown options: %s" % ", ".join(unknown))
        if kwargs:
            with self.rollback():
                for k, v in kwargs.items():
                    self._options[k].set(v)
                self.validate(set(kwargs))

    def set(self, *specs: str) -> None:
        """
        Takes a list of set specifications in standard form (option=value).
        The value of a bool option may be omitted, which means true.

        May raise an `OptionsError` if a value is malformed or an option is unknown.
        """
        values: dict[str, Any] = {}
        for spec in specs:
            name, sep, optstr = spec.partition("=")
            if name not in self._options:
                raise exceptions.OptionsError(f"Unknown option: {name}")
            if name in values:
                raise exceptions.OptionsError(f"Received multiple values for {name}")
            values[name] = self._parse_setval(
                self._options[name], optstr if sep else None
            )
        self.update(**values)

    def _parse_setval(self, o: _Option, optstr: Optional[str]) -> Any:
        """
        Convert a string to a value appropriate for the option type.
        """
        if o.typespec == str:
            if optstr is None:
                raise exceptions.OptionsError(f"Option is required: {o.name}")
            return optstr
        elif o.typespec == Optional[int]:
            if not optstr:
                return None
            try:
                return int(optstr)
            except ValueError:
                raise exceptions.OptionsError(f"Not an integer: {optstr}")
        elif o.typespec == bool:
            if optstr is None or optstr == "true":
                return True
            elif optstr == "false":
                return False
            raise exceptions.OptionsError(
                'Boolean must be "true", "false", or have the value omitted (a synonym for "true").'
            )
        raise NotImplementedError(f"Unsupported option type: {o.typespec}")


def parse(text: str) -> dict[str, Any]:
    if not text:
        return {}
    try:
        yaml = ruamel.yaml.YAML(typ="safe", pure=True)
        data = yaml.load(text)
    except ruamel.yaml.error.YAMLError as v:
        if hasattr(v, "problem_mark"):
            snip = v.problem_mark.get_snippet()
            raise exceptions.OptionsError(
                "Config error at line %s:\n%s\n%s"
                % (v.problem_mark.line + 1, snip, getattr(v, "problem", ""))
            )
        else:
            raise exceptions.OptionsError("Could not parse options.")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise exceptions.OptionsError("Config error - no keys found.")
    return data


def load(opts: OptManager, text: str) -> None:
    """
    Load configuration from text, over-writing options already set in
    this object. May raise OptionsError if the config file is invalid.
    """
    data = parse(text)
    try:
        opts.update(**data)
    except (KeyError, TypeError) as e:
        raise exceptions.OptionsError(str(e)) from e


def load_paths(opts: OptManager, *paths: Path | str) -> None:
    """
    Load paths in order. Each path takes precedence over the previous
    path. Paths that don't exist are ignored, errors raise an
    OptionsError.
    """
    for p in paths:
        p = Path(p).expanduser()
        if p.exists() and p.is_file():
            try:
                txt = p.read_text(encoding="utf8")
            except UnicodeDecodeError as e:
                raise exceptions.OptionsError(f"Error reading {p}: {e}")
            try:
                load(opts, txt)
            except exceptions.OptionsError as e:
                raise exceptions.OptionsError(f"Error reading {p}: {e}")
