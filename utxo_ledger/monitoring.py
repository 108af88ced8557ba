# utxo_ledger/monitoring.py
import os
import psutil
from prometheus_client import Counter, Gauge, Histogram, CollectorRegistry
from prometheus_client.exposition import make_wsgi_app
from wsgiref.simple_server import make_server, WSGIServer
from socketserver import ThreadingMixIn
import threading
import logging

logger = logging.getLogger(__name__)

# Create a threaded WSGI server for the Prometheus metrics
class ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """A WSGI server that runs in a separate thread to not block the main application."""
    allow_reuse_address = True


class Monitor:
    """Prometheus metrics for transaction validation and epoch processing."""

    def __init__(self, host="127.0.0.1", port=9090):
        self.host = host
        self.port = port
        self.server = None
        self.thread = None

        # Isolated registry so several handlers can coexist in one process
        self.registry = CollectorRegistry()

        self.tx_counter = Counter('ledger_transactions_total', 'Transactions evaluated in epochs', ['status'], registry=self.registry)
        self.rejection_counter = Counter('ledger_rejections_total', 'Rejected transactions by failed rule', ['reason'], registry=self.registry)
        self.epoch_counter = Counter('ledger_epochs_total', 'Epochs processed', registry=self.registry)
        self.epoch_latency = Histogram('ledger_epoch_latency_seconds', 'Time to process one epoch', registry=self.registry)
        self.pool_size = Gauge('ledger_utxo_pool_size', 'Number of unspent outputs in the pool', registry=self.registry)
        self.pool_value = Gauge('ledger_utxo_pool_value', 'Total value held by unspent outputs', registry=self.registry)
        self.memory_usage = Gauge('process_memory_rss_bytes', 'Resident memory of this process', registry=self.registry)

    def start_server(self):
        """Starts the Prometheus HTTP exposition server on a daemon thread."""
        app = make_wsgi_app(self.registry)
        try:
            self.server = make_server(self.host, self.port, app, ThreadingWSGIServer)
        except OSError as e:
            logger.error(f"Failed to bind metrics server to {self.host}:{self.port}: {e}")
            raise

        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self.thread.start()
        logger.info(f"Prometheus server started on http://{self.host}:{self.server.server_port}")

    def stop_server(self):
        """Stops the HTTP server."""
        if self.server:
            self.server.shutdown()
            self.server.server_close()
            self.server = None
            logger.info("Prometheus server stopped.")

    def update_pool(self, utxo_pool):
        self.pool_size.set(len(utxo_pool))
        self.pool_value.set(utxo_pool.total_value())
        self.memory_usage.set(psutil.Process(os.getpid()).memory_info().rss)

    def record_tx(self, accepted: bool, reason: str = ""):
        self.tx_counter.labels(status='accepted' if accepted else 'rejected').inc()
        if not accepted:
            self.rejection_counter.labels(reason=reason).inc()

    def record_epoch(self, latency: float):
        self.epoch_counter.inc()
        self.epoch_latency.observe(latency)

    def get_value(self, name: str, labels: dict = None) -> float:
        """Reads a sample from this monitor's registry (0.0 if never set)."""
        value = self.registry.get_sample_value(name, labels or {})
        return value if value is not None else 0.0
