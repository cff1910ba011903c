from __future__ import annotations

from typing import Callable, List, Sequence

import dns.exception
import dns.message

from edns_probe.logging import get_logger

from .builder import build
from .model import EndpointAddress, Outcome, TestCase, TestResult
from .registry import CASES
from .transport import Exchange, TransportError, exchange
from .validator import ValidationFailure, validate

logger = get_logger(__name__)

ExchangeFunc = Callable[[EndpointAddress, dns.message.Message, float], Exchange]


def normalize_zone(zone: str) -> str:
    return zone if zone.endswith(".") else f"{zone}."


class ProbeRunner:
    """
    Runs test cases one after another against a single server and zone.

    The cases do not share any state, a failure or transport error of one case is recorded
    in its result and the run continues with the next case.
    """

    def __init__(
        self,
        timeout: float,
        cases: Sequence[TestCase] = CASES,
        exchange_func: ExchangeFunc = exchange,
    ) -> None:
        self.timeout = timeout
        self.cases = tuple(cases)
        self._exchange = exchange_func

    def run_case(self, case: TestCase, endpoint: EndpointAddress, zone: str) -> TestResult:
        logger.debug("running test case '%s' against %s", case.name, endpoint)
        try:
            query = build(case.query, zone)
            result = self._exchange(endpoint, query.message, self.timeout)
            if result.truncated and not case.expected.allow_truncation:
                raise ValidationFailure("truncated response")
            validate(result.response, query.client_cookie, case.expected).raise_for_failure()
        except ValidationFailure as e:
            return TestResult(case.name, Outcome.FAIL, e.reason)
        except TransportError as e:
            return TestResult(case.name, Outcome.ERROR, str(e))
        except (ValueError, dns.exception.DNSException) as e:
            # transport errors are wrapped, so these come from building the query
            return TestResult(case.name, Outcome.ERROR, f"invalid query: {e}")
        return TestResult(case.name, Outcome.PASS)

    def run(self, endpoint: EndpointAddress, zone: str) -> List[TestResult]:
        zone = normalize_zone(zone)
        results: List[TestResult] = []
        for case in self.cases:
            result = self.run_case(case, endpoint, zone)
            if result.passed:
                logger.info("%s: success", result.name)
            else:
                logger.notice("%s: %s, %s", result.name, result.outcome.value, result.reason)
            results.append(result)
        return results
