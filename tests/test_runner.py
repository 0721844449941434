import threading
import time
import unittest
from unittest.mock import patch

from connchk.checks.results import Failure, Success
from connchk.errors import ConfigurationError, StatusMismatchError, TcpConnectError
from connchk.models import Target, TargetKind
from connchk.runner import probe_target, run_checks


def _tcp(desc: str, addr: str = "example.local:22") -> Target:
    return Target(kind=TargetKind.TCP, description=desc, address=addr)


def _http(desc: str, addr: str = "https://example.local/") -> Target:
    return Target(kind=TargetKind.HTTP, description=desc, address=addr)


class ProbeTargetTests(unittest.TestCase):
    def test_dispatches_tcp(self) -> None:
        with patch("connchk.runner.run_tcp") as tcp_mock, patch("connchk.runner.run_http") as http_mock:
            res = probe_target(3, _tcp("ssh", "gitlab.com:22"), tcp_timeout_s=2, http_timeout_s=4)

        tcp_mock.assert_called_once_with("gitlab.com:22", timeout_s=2)
        http_mock.assert_not_called()
        self.assertTrue(res.ok)
        self.assertEqual(res.sequence_index, 3)
        self.assertIsInstance(res.outcome, Success)

    def test_dispatches_http_with_custom_options(self) -> None:
        target = Target.model_validate(
            {
                "kind": "Http",
                "desc": "json",
                "addr": "https://example.local/status/400",
                "custom": {"json": {"k": "v"}, "ok": 400},
            }
        )
        with patch("connchk.runner.run_http", return_value=400) as http_mock:
            res = probe_target(0, target, tcp_timeout_s=2, http_timeout_s=4, http_connect_timeout_s=1)

        http_mock.assert_called_once_with(
            "https://example.local/status/400",
            target.custom,
            timeout_s=4,
            connect_timeout_s=1,
        )
        self.assertTrue(res.ok)

    def test_status_mismatch_becomes_failure(self) -> None:
        with patch("connchk.runner.run_http", side_effect=StatusMismatchError(502, 400, "Bad Gateway")):
            res = probe_target(0, _http("json"), tcp_timeout_s=2, http_timeout_s=4)

        self.assertFalse(res.ok)
        self.assertIsInstance(res.outcome, Failure)
        self.assertEqual(res.outcome.status_code, 502)
        self.assertEqual(res.outcome.error_kind, "status_mismatch")

    def test_unexpected_exception_becomes_failure(self) -> None:
        with patch("connchk.runner.run_tcp", side_effect=RuntimeError("boom")):
            with self.assertLogs("connchk.runner", level="ERROR"):
                res = probe_target(0, _tcp("ssh"), tcp_timeout_s=2, http_timeout_s=4)

        self.assertEqual(res.outcome.error_kind, "unexpected")
        self.assertIn("RuntimeError: boom", res.outcome.detail)


class RunChecksTests(unittest.TestCase):
    def test_empty_list(self) -> None:
        self.assertEqual(run_checks([]), [])

    def test_one_result_per_target_in_input_order(self) -> None:
        targets = [_tcp(f"t{i}", f"host{i}.local:{1000 + i}") for i in range(12)]
        with patch("connchk.runner.run_tcp"):
            results = run_checks(targets)

        self.assertEqual(len(results), 12)
        self.assertEqual([r.sequence_index for r in results], list(range(12)))
        self.assertEqual([r.description for r in results], [f"t{i}" for i in range(12)])

    def test_order_survives_slow_first_target(self) -> None:
        finished: list[str] = []
        lock = threading.Lock()

        def fake_tcp(address: str, timeout_s: float) -> None:
            if address == "slow.local:1":
                time.sleep(0.3)
            with lock:
                finished.append(address)

        targets = [_tcp("slow", "slow.local:1"), _tcp("fast-a", "a.local:1"), _tcp("fast-b", "b.local:1")]
        with patch("connchk.runner.run_tcp", side_effect=fake_tcp):
            results = run_checks(targets)

        self.assertEqual(finished[-1], "slow.local:1")
        self.assertEqual([r.description for r in results], ["slow", "fast-a", "fast-b"])

    def test_failures_do_not_contaminate_siblings(self) -> None:
        def fake_tcp(address: str, timeout_s: float) -> None:
            if address.startswith("bad"):
                raise TcpConnectError("ConnectionRefusedError: [Errno 111] Connection refused")

        def fake_http(url, options, timeout_s, connect_timeout_s=None) -> int:
            if "broken" in url:
                raise RuntimeError("probe exploded")
            return 200

        targets = [
            _tcp("ok-1", "good1.local:22"),
            _tcp("bad-1", "bad1.local:22"),
            _http("ok-2", "https://good.local/"),
            _http("bad-2", "https://broken.local/"),
            _tcp("ok-3", "good2.local:22"),
        ]
        with patch("connchk.runner.run_tcp", side_effect=fake_tcp), patch(
            "connchk.runner.run_http", side_effect=fake_http
        ), self.assertLogs("connchk.runner", level="WARNING"):
            results = run_checks(targets)

        self.assertEqual([r.ok for r in results], [True, False, True, False, True])
        self.assertEqual(results[1].outcome.error_kind, "connection")
        self.assertEqual(results[3].outcome.error_kind, "unexpected")
        self.assertEqual(sum(1 for r in results if r.ok), 3)

    def test_all_probes_in_flight_at_once(self) -> None:
        count = 20
        barrier = threading.Barrier(count, timeout=5)

        def fake_tcp(address: str, timeout_s: float) -> None:
            # Fails with BrokenBarrierError unless every probe runs concurrently.
            barrier.wait()

        targets = [_tcp(f"t{i}", f"h{i}.local:80") for i in range(count)]
        with patch("connchk.runner.run_tcp", side_effect=fake_tcp):
            results = run_checks(targets)

        self.assertTrue(all(r.ok for r in results))

    def test_timeouts_default_to_settings(self) -> None:
        with patch("connchk.runner.settings") as mock_settings, patch(
            "connchk.runner.run_tcp"
        ) as tcp_mock, patch("connchk.runner.run_http", return_value=200) as http_mock:
            mock_settings.TCP_TIMEOUT_SECONDS = 5.0
            mock_settings.HTTP_TIMEOUT_SECONDS = 10.0
            mock_settings.HTTP_CONNECT_TIMEOUT_SECONDS = 3.0
            run_checks([_tcp("ssh"), _http("web")])

        tcp_mock.assert_called_once_with("example.local:22", timeout_s=5.0)
        http_mock.assert_called_once_with(
            "https://example.local/", None, timeout_s=10.0, connect_timeout_s=3.0
        )

    def test_explicit_http_timeout_bounds_connect(self) -> None:
        with patch("connchk.runner.run_http", return_value=200) as http_mock:
            run_checks([_http("web")], http_timeout_s=2.5)

        http_mock.assert_called_once_with(
            "https://example.local/", None, timeout_s=2.5, connect_timeout_s=2.5
        )

    def test_raw_descriptors_are_accepted(self) -> None:
        with patch("connchk.runner.run_tcp"):
            results = run_checks([{"kind": "Tcp", "desc": "ssh", "addr": "gitlab.com:22"}])

        self.assertEqual(results[0].description, "ssh")
        self.assertEqual(results[0].kind, "tcp")

    def test_non_positive_timeout_rejected_before_any_probe(self) -> None:
        for kwargs in ({"tcp_timeout_s": 0}, {"http_timeout_s": -1}, {"http_connect_timeout_s": 0}):
            with self.subTest(kwargs=kwargs):
                with patch("connchk.runner.run_tcp") as tcp_mock, patch(
                    "connchk.runner.run_http"
                ) as http_mock:
                    with self.assertRaises(ConfigurationError):
                        run_checks([_tcp("ssh"), _http("web")], **kwargs)

                tcp_mock.assert_not_called()
                http_mock.assert_not_called()

    def test_ambiguous_descriptor_rejected_before_any_probe(self) -> None:
        for custom in ({"params": {"a": "b"}, "json": {"a": "b"}, "ok": 400}, {"ok": 400}):
            with self.subTest(custom=custom):
                descriptors = [
                    {"kind": "Tcp", "desc": "ssh", "addr": "gitlab.com:22"},
                    {"kind": "Http", "desc": "bad", "addr": "https://h/", "custom": custom},
                ]
                with patch("connchk.runner.run_tcp") as tcp_mock, patch(
                    "connchk.runner.run_http"
                ) as http_mock:
                    with self.assertRaises(ConfigurationError) as ctx:
                        run_checks(descriptors)

                tcp_mock.assert_not_called()
                http_mock.assert_not_called()
                self.assertIn("target #2", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
