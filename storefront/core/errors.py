# storefront/core/errors.py
# Доменные ошибки. Сервисы бросают их, main.py превращает в JSON-ответ
# вида {"error": <message>, "kind": <kind>} с нужным HTTP-кодом.


class StorefrontError(Exception):
    kind = "StorefrontError"
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> dict:
        return {"error": self.message, "kind": self.kind}


class Unauthorized(StorefrontError):
    """Нет учётных данных или они не прошли проверку."""

    kind = "Unauthorized"
    status_code = 401
    default_message = "Unauthorized"


class InvalidCredential(Unauthorized):
    """Токен битый, подписан чужим ключом или истёк."""

    default_message = "Invalid token"


class UserNotFound(StorefrontError):
    kind = "UserNotFound"
    status_code = 404
    default_message = "User not found"


class ItemNotFound(StorefrontError):
    kind = "ItemNotFound"
    status_code = 404
    default_message = "Item not found"


class ValidationError(StorefrontError):
    kind = "ValidationError"
    status_code = 400
    default_message = "Invalid request"


class EmailAlreadyRegistered(ValidationError):
    default_message = "Email already registered"


class StorageFailure(StorefrontError):
    """Хранилище недоступно или конфликт записи не разрешился за отведённые попытки."""

    kind = "StorageFailure"
    status_code = 500
    default_message = "Storage failure"
