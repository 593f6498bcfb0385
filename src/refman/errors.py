# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy.

Every error carries the HTTP status it maps to; the app renders them as
``{"message": ...}``.
"""

from __future__ import annotations


class RefmanError(Exception):
    status_code = 500
    default_message = "Error interno"

    def __init__(self, message: str = ""):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(RefmanError):
    status_code = 400
    default_message = "Datos no válidos"

    def __init__(self, message: str = "", field: str = ""):
        super().__init__(message)
        self.field = field


class AuthenticationError(RefmanError):
    status_code = 401
    default_message = "No autorizado"


class InvalidTokenError(AuthenticationError):
    default_message = "Token ausente o no válido"


class WrongPasswordError(AuthenticationError):
    default_message = "Contraseña incorrecta"


class NotFoundError(RefmanError):
    status_code = 404
    default_message = "No encontrado"


class UserNotFoundError(NotFoundError):
    default_message = "Usuario no encontrado"


class ConflictError(RefmanError):
    status_code = 400
    default_message = "Conflicto con un registro existente"


class DuplicateUsernameError(ConflictError):
    default_message = "El nombre de usuario ya existe"


class DuplicateDoiError(ConflictError):
    default_message = "Ya existe un artículo con ese DOI"


class UpstreamError(RefmanError):
    status_code = 500
    default_message = "Error del servidor"
