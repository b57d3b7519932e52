from __future__ import annotations

from typing import Any, Mapping

DEFAULT_LANGUAGE = "en"

CATALOGUES: dict[str, dict[str, str]] = {
    "en": {
        "sites.confirm_delete": "Are you sure you want to delete this site? This action cannot be undone.",
        "errors.load": "Failed to load your sites. Please try again.",
        "errors.create": "Failed to create site. Please try again.",
        "errors.update": "Failed to update site. Please try again.",
        "errors.delete": "Failed to delete site. Please try again.",
        "errors.duplicate": "Failed to duplicate site. Please try again.",
        "errors.not_found": "Site not found.",
        "preview.contact_submit": "Send",
        "preview.business_hours": "Business hours",
        "preview.closed": "Closed",
        "preview.services": "Services",
    },
    "es": {
        "sites.confirm_delete": "¿Seguro que quieres eliminar este sitio? Esta acción no se puede deshacer.",
        "errors.load": "No se pudieron cargar tus sitios. Inténtalo de nuevo.",
        "errors.create": "No se pudo crear el sitio. Inténtalo de nuevo.",
        "errors.update": "No se pudo actualizar el sitio. Inténtalo de nuevo.",
        "errors.delete": "No se pudo eliminar el sitio. Inténtalo de nuevo.",
        "errors.duplicate": "No se pudo duplicar el sitio. Inténtalo de nuevo.",
        "errors.not_found": "Sitio no encontrado.",
        "preview.contact_submit": "Enviar",
        "preview.business_hours": "Horario",
        "preview.closed": "Cerrado",
        "preview.services": "Servicios",
    },
}


class Localizer:
    """Message lookup for one language with English fallback."""

    def __init__(
        self,
        language: str = DEFAULT_LANGUAGE,
        catalogues: Mapping[str, Mapping[str, str]] | None = None,
    ) -> None:
        self._catalogues = catalogues or CATALOGUES
        resolved = (language or DEFAULT_LANGUAGE).split("-")[0].lower()
        self.language = resolved if resolved in self._catalogues else DEFAULT_LANGUAGE

    def t(self, key: str, **params: Any) -> str:
        message = self._catalogues.get(self.language, {}).get(key)
        if message is None:
            message = self._catalogues.get(DEFAULT_LANGUAGE, {}).get(key, key)
        if params:
            return message.format(**params)
        return message


__all__ = ["CATALOGUES", "DEFAULT_LANGUAGE", "Localizer"]
