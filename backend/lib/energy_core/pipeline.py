# backend/lib/energy_core/pipeline.py
"""
Usage ingestion: validate one reading, persist it, compare it against the
user's alert threshold, and append it to the time-series store.

Failure policy per step:
    validation        fatal (ClientInputError, nothing written yet)
    durable write     fatal (PersistenceError)
    threshold check   never fatal; lookup and publish failures are logged
    time-series write fatal (TimeSeriesWriteError), even though the
                      durable record already exists
"""
import json
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Optional

from backend.lib.observability import logger
from .errors import ClientInputError, PersistenceError, TimeSeriesWriteError
from .models import AlertEvent, IngestionResult, UsageObservation
from .validation import is_present, is_valid_date, parse_non_negative

ALERT_SUBJECT = "Energy Usage Threshold Exceeded"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(instant: datetime) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2023-01-01T12:00:00.000Z"""
    text = instant.astimezone(timezone.utc).isoformat(timespec='milliseconds')
    return text.replace('+00:00', 'Z')


def epoch_millis(instant: datetime) -> int:
    return int(instant.timestamp() * 1000)


class UsageIngestionPipeline:
    """
    Runs one reading through the ingestion steps.

    Collaborators are passed in rather than created here:
        record_store  put_usage(item) -> bool, get_threshold(user_id) -> ThresholdSetting | None
        time_series   write_usage(user_id, date, usage, time_ms) -> bool
        notifier      publish(message, subject) -> bool
    """

    def __init__(self, record_store, time_series, notifier,
                 clock: Callable[[], datetime] = utc_now):
        self.record_store = record_store
        self.time_series = time_series
        self.notifier = notifier
        self.clock = clock

    def ingest(self, user_id: Optional[str], date, usage, timestamp=None) -> IngestionResult:
        observation, processed_at = self._validate(user_id, date, usage, timestamp)

        item = {
            'id': observation.user_id,
            'date': observation.date,
            'usage': Decimal(str(observation.usage)),
            'timestamp': observation.timestamp,
        }
        if not self.record_store.put_usage(item):
            raise PersistenceError("Error saving energy data")
        logger.info("Energy data added to record store",
                    extra={'user_id': observation.user_id, 'date': observation.date})

        threshold = self._check_threshold(observation)
        exceeded = threshold is not None and observation.usage > threshold

        written = self.time_series.write_usage(
            observation.user_id,
            observation.date,
            observation.usage,
            epoch_millis(processed_at),
        )
        if not written:
            raise TimeSeriesWriteError("Error saving energy data")
        logger.info("Energy usage added to time-series store",
                    extra={'user_id': observation.user_id, 'date': observation.date})

        return IngestionResult(
            observation=observation,
            threshold=threshold,
            threshold_exceeded=exceeded,
        )

    def _validate(self, user_id, date, usage, timestamp):
        if not is_present(user_id):
            raise ClientInputError("Missing required parameters")
        if not is_present(date) or not is_present(usage):
            raise ClientInputError("Missing required parameters")
        if not is_valid_date(date):
            raise ClientInputError("Invalid date format. Use YYYY-MM-DD")
        value = parse_non_negative(usage, "Usage must be a non-negative number")

        processed_at = self.clock()
        if not is_present(timestamp):
            timestamp = format_timestamp(processed_at)

        observation = UsageObservation(
            user_id=str(user_id),
            date=date,
            usage=value,
            timestamp=str(timestamp),
        )
        return observation, processed_at

    def _check_threshold(self, observation: UsageObservation) -> Optional[float]:
        """
        Look up the user's threshold and publish an alert when it is exceeded.

        Never raises: a failed lookup counts as no threshold and a failed
        publish is only logged.
        """
        try:
            setting = self.record_store.get_threshold(observation.user_id)
            threshold = float(setting.threshold) if setting is not None and setting.is_defined else None
        except Exception:
            logger.exception("Threshold lookup failed", extra={'user_id': observation.user_id})
            return None
        if threshold is None:
            logger.info("No threshold set", extra={'user_id': observation.user_id})
            return None

        if observation.usage > threshold:
            logger.info("Energy usage exceeds threshold, sending notification",
                        extra={'user_id': observation.user_id, 'usage': observation.usage,
                               'threshold': threshold})
            alert = AlertEvent.for_observation(observation, threshold)
            try:
                sent = self.notifier.publish(json.dumps(alert.to_dict()), ALERT_SUBJECT)
            except Exception:
                logger.exception("Threshold notification failed",
                                 extra={'user_id': observation.user_id})
                sent = False
            if not sent:
                logger.warning("Threshold notification was not sent",
                               extra={'user_id': observation.user_id})
        else:
            logger.info("Energy usage is within threshold",
                        extra={'user_id': observation.user_id})
        return threshold
