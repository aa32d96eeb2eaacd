import logging
import random
import threading
import time
from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple, Type

logger = logging.getLogger(__name__)


# Custom Exception Classes
class ScraperError(Exception):
    """Base exception for all scraper errors"""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}


class ParsingError(ScraperError):
    """Errors during HTML/data parsing"""

    pass


class ExtractionError(ScraperError):
    """Errors during data extraction"""

    pass


class MissingFieldError(ExtractionError):
    """A required field label is absent from a product field map"""

    def __init__(self, label: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(f"Missing required field '{label}'", context)
        self.label = label


class ConfigurationError(ScraperError):
    """Configuration-related errors"""

    pass


class NetworkError(ScraperError):
    """Network and connectivity issues"""

    pass


class RetryManager:
    """Manages retry logic with exponential backoff"""

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        backoff_factor: float = 2.0,
        jitter: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.backoff_factor = backoff_factor
        self.jitter = jitter
        self.failure_counts = defaultdict(int)
        self._sleep = sleep

    def _calculate_delay(self, attempt: int) -> float:
        """Calculate delay with exponential backoff and optional jitter"""
        delay = min(self.base_delay * (self.backoff_factor**attempt), self.max_delay)
        if self.jitter:
            delay *= 0.5 + random.random() * 0.5  # Add 50% jitter
        return delay

    def retry(
        self,
        func: Callable,
        *args,
        key: str = "default",
        retry_on: Tuple[Type[BaseException], ...] = (NetworkError,),
        **kwargs,
    ):
        """Execute function, retrying on the given exception types"""
        last_exception: Optional[BaseException] = None
        for attempt in range(self.max_retries + 1):
            try:
                return func(*args, **kwargs)
            except retry_on as e:
                last_exception = e
                self.failure_counts[key] += 1

                if attempt == self.max_retries:
                    break

                delay = self._calculate_delay(attempt)
                logger.warning(
                    "Attempt %d/%d for %s failed: %s; retrying in %.2fs",
                    attempt + 1,
                    self.max_retries + 1,
                    key,
                    e,
                    delay,
                )
                self._sleep(delay)

        raise last_exception

    def get_failure_stats(self) -> Dict[str, int]:
        """Get failure statistics"""
        return dict(self.failure_counts)


class ErrorReporter:
    """Error aggregation and reporting system"""

    def __init__(self):
        self.errors = defaultdict(list)
        self.error_stats = defaultdict(int)
        self._lock = threading.Lock()

    def report_error(self, error: Exception, context: Optional[Dict[str, Any]] = None):
        """Report an error for aggregation"""
        error_type = type(error).__name__

        error_record = {
            "timestamp": datetime.now(),
            "error_type": error_type,
            "message": str(error),
            "context": context or getattr(error, "context", {}),
        }

        with self._lock:
            self.errors[error_type].append(error_record)
            self.error_stats[error_type] += 1

    def generate_report(self) -> Dict[str, Any]:
        """Generate error report"""
        with self._lock:
            report = {
                "generated_at": datetime.now().isoformat(),
                "total_errors": sum(self.error_stats.values()),
                "error_types": dict(self.error_stats),
                "recent_errors": {},
            }

            # Get recent errors (last 10 per type)
            for error_type, error_list in self.errors.items():
                report["recent_errors"][error_type] = error_list[-10:]

            return report
