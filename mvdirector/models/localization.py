"""Bilingual field model.

Each localized field ``F`` has a canonical value plus optional per-locale
overrides. ``resolve`` is the single place that decides which string is shown.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, Field


class Locale(str, Enum):
    """Supported content locales."""

    KO = "ko"
    EN = "en"

    @property
    def other(self) -> "Locale":
        return Locale.EN if self is Locale.KO else Locale.KO


def _as_locale_code(locale: Any) -> str:
    if isinstance(locale, Locale):
        return locale.value
    return str(locale)


def resolve(entity: Any, field_name: str, locale: Any) -> str:
    """Resolve the text to display for ``field_name`` in ``locale``.

    Order: ``F_<locale>`` if non-empty, else ``F``, else ``""``. Works on
    ``LocalizedModel`` instances and on flat mappings such as
    ``{"title": ..., "title_ko": ...}``. Never raises.
    """
    if entity is None:
        return ""

    code = _as_locale_code(locale)

    if isinstance(entity, Mapping):
        value = entity.get(f"{field_name}_{code}")
        if value:
            return str(value)
        return str(entity.get(field_name) or "")

    localized = getattr(entity, "localized", None)
    if isinstance(localized, Mapping):
        for key, fields in localized.items():
            if _as_locale_code(key) == code and isinstance(fields, Mapping):
                value = fields.get(field_name)
                if value:
                    return str(value)
                break

    return str(getattr(entity, field_name, "") or "")


class LocalizedModel(BaseModel):
    """Base for records whose text fields are carried in every locale."""

    LOCALIZED_FIELDS: ClassVar[tuple[str, ...]] = ()

    localized: dict[Locale, dict[str, str]] = Field(default_factory=dict)

    def text(self, field_name: str, locale: Any) -> str:
        return resolve(self, field_name, locale)

    def set_localized(self, field_name: str, locale: Any, value: str) -> None:
        """Set one locale override without touching the canonical field."""
        self._check_field(field_name)
        self.localized.setdefault(Locale(_as_locale_code(locale)), {})[field_name] = value

    def apply_manual_edit(self, field_name: str, value: str) -> None:
        """Apply a hand edit.

        Only the canonical field is written; the per-locale overrides for that
        field are dropped so both locales resolve to the edited text.
        """
        self._check_field(field_name)
        setattr(self, field_name, value)
        for fields in self.localized.values():
            fields.pop(field_name, None)

    def to_flat_dict(self) -> dict[str, Any]:
        """Flatten to ``F``, ``F_ko``, ``F_en`` keys (non-localized fields as-is)."""
        data = self.model_dump(exclude={"localized"})
        for name in self.LOCALIZED_FIELDS:
            for locale in Locale:
                data[f"{name}_{locale.value}"] = self.localized.get(locale, {}).get(name, "")
        return data

    @classmethod
    def from_flat(cls, data: Mapping[str, Any], default_locale: Optional[Any] = None, **extra: Any):
        """Build from a flat mapping with locale-suffixed keys.

        When ``default_locale`` is given, each canonical field is taken from
        that locale's value; otherwise the mapping's own ``F`` is used (or, if
        absent, whichever locale is present).
        """
        code = _as_locale_code(default_locale) if default_locale is not None else None
        values: dict[str, Any] = {}
        localized: dict[Locale, dict[str, str]] = {}

        for name in cls.LOCALIZED_FIELDS:
            per_locale = {}
            for locale in Locale:
                value = data.get(f"{name}_{locale.value}")
                if value:
                    per_locale[locale] = str(value)
                    localized.setdefault(locale, {})[name] = str(value)

            if code is not None and per_locale.get(Locale(code)):
                values[name] = per_locale[Locale(code)]
            elif data.get(name):
                values[name] = str(data[name])
            elif per_locale:
                values[name] = next(iter(per_locale.values()))
            else:
                values[name] = ""

        values.update(extra)
        return cls(localized=localized, **values)

    def _check_field(self, field_name: str) -> None:
        if field_name not in self.LOCALIZED_FIELDS:
            raise KeyError(f"{type(self).__name__} has no localized field '{field_name}'")
