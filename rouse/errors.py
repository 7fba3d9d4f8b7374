"""Errors raised by domain rules, by ports (storage, delivery, parsing) and by routing."""

from __future__ import annotations


class DomainError(Exception):
    """A domain rule was violated."""

    default_message = "domain error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)


class AlertAlreadyResolved(DomainError):
    """The alert was resolved and cannot change state any more."""

    default_message = "alert is already resolved"


class ScheduleRequiresParticipant(DomainError):
    """A schedule was created without participants."""

    default_message = "schedule requires at least one participant"


class InvalidPhoneFormat(DomainError):
    """A phone number is not in E.164 form."""

    default_message = "invalid phone format"


class InvalidOverridePeriod(DomainError):
    """An override ends at or before its start."""

    default_message = "invalid override period"


class InvalidId(DomainError):
    """A text could not be parsed as an identifier of the given kind."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"invalid id: {kind}")


class PolicyRequiresStep(DomainError):
    """An escalation policy was created without steps."""

    default_message = "policy requires at least one step"


class StepRequiresTarget(DomainError):
    """An escalation step has no targets."""

    default_message = "step requires at least one target"


class StepRequiresChannel(DomainError):
    """An escalation step has no channels."""

    default_message = "step requires a channel"


class TeamRequiresMember(DomainError):
    """A team was created without members."""

    default_message = "team requires at least one member"


class PortError(Exception):
    """A storage or infrastructure port failed."""

    default_message = "port error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)


class NotFound(PortError):
    """The requested record does not exist."""

    default_message = "not found"


class PersistenceError(PortError):
    """Reading or writing stored data failed."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"persistence error: {detail}")


class PortConnectionError(PortError):
    """A connection to a backing service could not be made."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"connection error: {detail}")


class NotifyError(Exception):
    """Delivering a notification failed."""

    default_message = "notify error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)


class ChannelUnavailable(NotifyError):
    """The delivery channel cannot be reached."""

    default_message = "channel unavailable"


class RateLimited(NotifyError):
    """The delivery channel refused because of rate limits."""

    default_message = "rate limited"


class InvalidTarget(NotifyError):
    """The notification target is not valid for the channel."""

    default_message = "invalid target"


class DeliveryFailed(NotifyError):
    """The channel accepted the request but delivery failed."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"delivery failed: {detail}")


class ParseError(Exception):
    """An incoming alert payload could not be parsed."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class InvalidJson(ParseError):
    """The payload is not valid JSON."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"invalid JSON: {detail}")


class MissingField(ParseError):
    """A required field is absent from the payload."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"missing required field: {field}")


class InvalidPayload(ParseError):
    """The payload has an unexpected shape."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"invalid payload: {detail}")


class RoutingError(Exception):
    """An alert could not be routed."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"routing error: {detail}")