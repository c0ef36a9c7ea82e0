"""
Shared metrics configuration for the ACL decision engine.
"""

from typing import Dict, Any, Optional

from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry


class AclMetrics:
    """Prometheus collectors for decisions and policy mutations."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        # Fresh registry unless one is shared in
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up decision and mutation metrics."""
        self._metrics["decisions_total"] = Counter(
            "acl_decisions_total",
            "Total access decisions",
            ["result"],
            registry=self.registry
        )

        self._metrics["decision_duration_seconds"] = Histogram(
            "acl_decision_duration_seconds",
            "Access decision duration in seconds",
            registry=self.registry
        )

        self._metrics["mutations_total"] = Counter(
            "acl_mutations_total",
            "Total policy mutations",
            ["operation"],
            registry=self.registry
        )

        self._metrics["rules"] = Gauge(
            "acl_rules",
            "Number of rules currently held",
            registry=self.registry
        )

    def record_decision(self, allowed: bool, duration_seconds: float):
        """Record an access decision."""
        result = "allow" if allowed else "deny"
        self._metrics["decisions_total"].labels(result=result).inc()
        self._metrics["decision_duration_seconds"].observe(duration_seconds)

    def record_mutation(self, operation: str, rule_count: Optional[int] = None):
        """Record a policy mutation and, when known, the resulting rule count."""
        self._metrics["mutations_total"].labels(operation=operation).inc()
        if rule_count is not None:
            self._metrics["rules"].set(rule_count)

    def get_sample(self, name: str, labels: Optional[Dict[str, str]] = None) -> Optional[float]:
        """Read a sample value from the registry."""
        return self.registry.get_sample_value(name, labels or {})
