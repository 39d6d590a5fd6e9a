"""Outcomes of a check-in confirmation that are not a success.

Every error carries the HTTP status it is reported with and renders its own
JSON body; the FastAPI exception handler in ``main.py`` only forwards them.
"""
from typing import Any, Dict, Optional


class ConfirmationError(Exception):
    status_code = 500
    message = "Erro interno ao confirmar presença."

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def body(self) -> Dict[str, Any]:
        return {"error": self.message}


class InvalidInput(ConfirmationError):
    status_code = 400
    message = "CPF inválido. Use 11 dígitos."


class ServiceNotReady(ConfirmationError):
    status_code = 503
    message = "Serviço inicializando. Tente novamente em instantes."


class NotRegistered(ConfirmationError):
    status_code = 404
    message = "CPF não inscrito."


class NoRegistrationNumber(ConfirmationError):
    status_code = 400
    message = "Cadastro encontrado, mas sem número de inscrição. Procure a organização."

    def __init__(self, name: str):
        super().__init__()
        self.name = name

    def body(self) -> Dict[str, Any]:
        return {"error": self.message, "nome": self.name}


class OutsideWindowWaiting(ConfirmationError):
    status_code = 400
    error_code = "FORA_HORARIO_AGUARDE"

    def __init__(self, name: str, day: str, label: str, hours: str, minutes: str):
        super().__init__(
            f"Olá, {name}! O check-in de {label} abre em {hours}h{minutes}min."
        )
        self.name = name
        self.day = day
        self.label = label
        self.hours = hours
        self.minutes = minutes

    def body(self) -> Dict[str, Any]:
        return {
            "errorCode": self.error_code,
            "nome": self.name,
            "proximoDia": self.day,
            "labelDia": self.label,
            "iniciaEm": {"horas": self.hours, "minutos": self.minutes},
            "message": self.message,
        }


class EventClosed(ConfirmationError):
    status_code = 400
    error_code = "EVENTO_ENCERRADO"
    message = "O evento foi encerrado. Check-in indisponível."

    def body(self) -> Dict[str, Any]:
        return {"errorCode": self.error_code, "message": self.message}


class OutsideWindowGeneric(ConfirmationError):
    status_code = 400
    message = "Fora do horário permitido."


class MisconfiguredDayTable(ConfirmationError):
    status_code = 500
    message = "Planilha de check-in do dia mal configurada."

    def __init__(self, day: str):
        super().__init__(f"Planilha de check-in '{day}' mal configurada.")
        self.day = day


class AlreadyConfirmed(ConfirmationError):
    status_code = 409

    def __init__(
        self,
        name: str,
        registration: str,
        day: str,
        date: Optional[str] = None,
        time: Optional[str] = None,
    ):
        if date and time:
            message = f"Inscrição já confirmada em {date} às {time}."
        else:
            message = "Inscrição já confirmada."
        super().__init__(message)
        self.name = name
        self.registration = registration
        self.day = day
        self.date = date
        self.time = time

    def body(self) -> Dict[str, Any]:
        body = {
            "message": self.message,
            "nome": self.name,
            "inscricao": self.registration,
            "dia": self.day,
        }
        if self.date and self.time:
            body["data"] = self.date
            body["hora"] = self.time
        return body


class ServiceBusy(ConfirmationError):
    status_code = 503
    message = "Serviço sobrecarregado. Tente novamente em alguns segundos."


class InternalError(ConfirmationError):
    pass
