"""Utility helpers shared by the portal configuration loader."""

from __future__ import annotations

import typing as typ

from .models import DeployProfile, SiteConfigError

DEFAULT_PROFILES: dict[str, DeployProfile] = {
    "github": DeployProfile(name="github", prefix="/second-brain", markers=(".nojekyll",)),
    "local": DeployProfile(name="local", prefix=""),
}


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _string_list(value: object | None, *, field: str) -> tuple[str, ...]:
    """Normalize a YAML scalar or list into a tuple of non-empty strings."""
    match value:
        case None:
            return ()
        case str() as text:
            return tuple(segment for segment in text.split() if segment)
        case list() | tuple():
            return tuple(text for item in value if (text := str(item).strip()))
        case _:
            msg = f"'{field}' must be a string or a list of strings."
            raise SiteConfigError(msg)


def _positive_int(value: object, *, field: str) -> int:
    """Return ``value`` as a positive integer or raise :class:`SiteConfigError`."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        msg = f"'{field}' must be a positive integer, got {value!r}."
        raise SiteConfigError(msg)
    return value


def _build_profile(name: str, payload: typ.Mapping[str, typ.Any] | None) -> DeployProfile:
    """Build a DeployProfile, inheriting unspecified values from the built-ins."""
    base = DEFAULT_PROFILES.get(name, DeployProfile(name=name))
    if not payload:
        return base
    prefix = payload.get("prefix", base.prefix)
    if prefix is not None and not isinstance(prefix, str):
        msg = f"Profile '{name}' has a non-string prefix."
        raise SiteConfigError(msg)
    markers = payload.get("markers")
    return DeployProfile(
        name=name,
        prefix=prefix or "",
        markers=base.markers
        if markers is None
        else _string_list(markers, field=f"profiles.{name}.markers"),
    )


def _merge_profiles(
    payload: typ.Mapping[str, typ.Any] | None,
) -> dict[str, DeployProfile]:
    """Merge configured profiles over the built-in ``github`` and ``local`` ones."""
    result = dict(DEFAULT_PROFILES)
    for name, profile_payload in (payload or {}).items():
        match profile_payload:
            case dict() | None:
                result[str(name)] = _build_profile(str(name), profile_payload)
            case _:
                msg = f"Profile '{name}' must be a mapping."
                raise SiteConfigError(msg)
    return result


__all__ = [
    "DEFAULT_PROFILES",
    "_build_profile",
    "_merge_profiles",
    "_optional_str",
    "_positive_int",
    "_string_list",
]
