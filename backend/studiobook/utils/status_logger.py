import logging
from sqlalchemy import event
from sqlalchemy.orm.attributes import NO_VALUE

from .. import models

logger = logging.getLogger(__name__)

_registered = False


def _value(v):  # noqa: ANN001
    return getattr(v, "value", v)


def _listener_factory(model_name: str, field: str):
    """Return a SQLAlchemy attribute listener that logs changes to ``field``."""

    def _status_change(target, value, oldvalue, initiator):  # noqa: ANN001
        if oldvalue is NO_VALUE or oldvalue is None or _value(oldvalue) == _value(value):
            return value
        logger.info(
            "%s id=%s %s changed from %s to %s",
            model_name,
            getattr(target, "id", "unknown"),
            field,
            _value(oldvalue),
            _value(value),
        )
        return value

    return _status_change


def register_status_listeners() -> None:
    """Attach listeners to the booking status and payment status columns."""
    global _registered
    if _registered:
        return
    for attr, field in (
        (models.Booking.status, "status"),
        (models.Booking.payment_status, "payment_status"),
    ):
        event.listen(
            attr,
            "set",
            _listener_factory("Booking", field),
            retval=False,
            active_history=True,
            propagate=True,
        )
    _registered = True
