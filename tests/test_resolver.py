import itertools
import unittest

from bridge.models import (
    AcquisitionRequest,
    ConfigErrorKind,
    DOWNLOAD_DECISIONS,
    DownloadFromCustomUrl,
    DownloadLatest,
    DownloadVersion,
    Error,
    Skip,
)
from bridge.resolver import (
    DEFAULT_REPOSITORY,
    DEFAULT_REPOSITORY_URL,
    BridgeRepository,
    explicit_version,
    resolve,
)

URL = "https://mirror.example.com/bridge-cli-bundle-linux64.zip"


def _all_requests():
    """Every combination of the boolean/optional request fields."""
    for airgap, thin, cached, cached_version, url, version in itertools.product(
        (False, True),
        (False, True),
        (False, True),
        (None, "2.1.1"),
        (None, URL),
        (None, "2.1.1", "3.0.0", "latest"),
    ):
        if cached_version and not cached:
            continue
        yield AcquisitionRequest(
            airgap_enabled=airgap,
            thin_client_enabled=thin,
            cached=cached,
            cached_version=cached_version,
            custom_url=url,
            requested_version=version,
        )


class TestResolverScenarios(unittest.TestCase):
    def test_airgap_without_cache_or_url_is_config_error(self) -> None:
        d = resolve(AcquisitionRequest(airgap_enabled=True))
        self.assertEqual(Error(ConfigErrorKind.AIRGAP_BINARY_UNAVAILABLE), d)

    def test_cached_binary_without_url_or_version_is_reused(self) -> None:
        self.assertIsInstance(resolve(AcquisitionRequest(cached=True)), Skip)
        self.assertIsInstance(resolve(AcquisitionRequest(cached=True, airgap_enabled=True)), Skip)

    def test_cached_version_matching_request_is_reused(self) -> None:
        d = resolve(AcquisitionRequest(cached=True, cached_version="2.1.1", requested_version="2.1.1"))
        self.assertIsInstance(d, Skip)

    def test_cached_version_mismatch_downloads_requested_version(self) -> None:
        d = resolve(AcquisitionRequest(cached=True, cached_version="2.0.0", requested_version="2.1.1"))
        self.assertIsInstance(d, DownloadVersion)
        self.assertEqual("2.1.1", d.version)
        self.assertEqual(
            f"{DEFAULT_REPOSITORY_URL}/bridge-cli-bundle/2.1.1/bridge-cli-bundle-2.1.1-linux64.zip",
            d.source,
        )

    def test_cached_but_unknown_version_downloads_requested_version(self) -> None:
        d = resolve(AcquisitionRequest(cached=True, cached_version=None, requested_version="2.1.1"))
        self.assertIsInstance(d, DownloadVersion)

    def test_custom_url_wins_over_cache_and_default_repository(self) -> None:
        d = resolve(AcquisitionRequest(cached=True, custom_url=URL))
        self.assertEqual(DownloadFromCustomUrl(url=URL), d)

    def test_custom_url_with_matching_cached_version_is_reused(self) -> None:
        d = resolve(
            AcquisitionRequest(
                custom_url=URL, cached=True, cached_version="2.1.1", requested_version="2.1.1"
            )
        )
        self.assertIsInstance(d, Skip)

    def test_custom_url_keeps_requested_version(self) -> None:
        d = resolve(AcquisitionRequest(custom_url=URL, requested_version="3.0.0"))
        self.assertEqual(DownloadFromCustomUrl(url=URL, version="3.0.0"), d)

    def test_custom_url_is_allowed_under_airgap(self) -> None:
        d = resolve(AcquisitionRequest(airgap_enabled=True, custom_url=URL))
        self.assertIsInstance(d, DownloadFromCustomUrl)

    def test_airgap_with_cache_version_mismatch_is_config_error(self) -> None:
        d = resolve(
            AcquisitionRequest(
                airgap_enabled=True, cached=True, cached_version="2.0.0", requested_version="2.1.1"
            )
        )
        self.assertIsInstance(d, Error)

    def test_nothing_cached_downloads_latest(self) -> None:
        d = resolve(AcquisitionRequest())
        self.assertEqual(
            DownloadLatest(
                source=f"{DEFAULT_REPOSITORY_URL}/bridge-cli-bundle/latest/bridge-cli-bundle-linux64.zip"
            ),
            d,
        )

    def test_thin_client_uses_thin_client_artifact(self) -> None:
        d = resolve(AcquisitionRequest(thin_client_enabled=True, platform="macos_arm"))
        self.assertIsInstance(d, DownloadLatest)
        self.assertTrue(
            d.source.endswith("/bridge-cli-thin-client/latest/bridge-cli-thin-client-macos_arm.zip")
        )

    def test_latest_is_not_an_explicit_version(self) -> None:
        self.assertIsInstance(resolve(AcquisitionRequest(cached=True, requested_version="latest")), Skip)
        self.assertIsInstance(resolve(AcquisitionRequest(requested_version="LATEST")), DownloadLatest)

    def test_mirror_repository_changes_default_urls_only(self) -> None:
        repo = BridgeRepository(base_url="https://artifacts.internal/bridge/")
        d = resolve(AcquisitionRequest(requested_version="2.1.1"), repo)
        self.assertEqual(
            "https://artifacts.internal/bridge/bridge-cli-bundle/2.1.1/bridge-cli-bundle-2.1.1-linux64.zip",
            d.source,
        )
        self.assertEqual(
            DownloadFromCustomUrl(url=URL), resolve(AcquisitionRequest(custom_url=URL), repo)
        )


class TestResolverProperties(unittest.TestCase):
    def test_resolve_is_total_and_deterministic(self) -> None:
        for req in _all_requests():
            with self.subTest(req=req):
                d = resolve(req)
                self.assertIsInstance(d, (Skip, Error) + DOWNLOAD_DECISIONS)
                self.assertEqual(d, resolve(req))

    def test_airgap_never_downloads_from_default_repository(self) -> None:
        for req in _all_requests():
            if not req.airgap_enabled:
                continue
            with self.subTest(req=req):
                self.assertNotIsInstance(resolve(req), (DownloadLatest, DownloadVersion))

    def test_custom_url_always_wins_when_downloading(self) -> None:
        for req in _all_requests():
            if not req.custom_url:
                continue
            with self.subTest(req=req):
                d = resolve(req)
                if isinstance(d, Skip):
                    # only a cached binary already at the pinned version beats the URL
                    version = explicit_version(req.requested_version)
                    self.assertTrue(req.cached)
                    self.assertIsNotNone(version)
                    self.assertEqual(version, req.cached_version)
                else:
                    self.assertIsInstance(d, DownloadFromCustomUrl)

    def test_cached_without_url_or_version_always_skips(self) -> None:
        for req in _all_requests():
            if req.cached and not req.custom_url and explicit_version(req.requested_version) is None:
                with self.subTest(req=req):
                    self.assertIsInstance(resolve(req), Skip)

    def test_error_only_under_airgap(self) -> None:
        for req in _all_requests():
            if isinstance(resolve(req), Error):
                self.assertTrue(req.airgap_enabled, req)


class TestWorkflowVersionAndHelpers(unittest.TestCase):
    def test_workflow_version_only_applies_to_thin_client(self) -> None:
        self.assertIsNone(AcquisitionRequest(requested_workflow_version="1.2.3").effective_workflow_version)
        self.assertEqual(
            "1.2.3",
            AcquisitionRequest(
                thin_client_enabled=True, requested_workflow_version="1.2.3"
            ).effective_workflow_version,
        )

    def test_explicit_version(self) -> None:
        self.assertIsNone(explicit_version(None))
        self.assertIsNone(explicit_version("  "))
        self.assertIsNone(explicit_version("Latest"))
        self.assertEqual("2.1.1", explicit_version(" 2.1.1 "))

    def test_latest_versions_url(self) -> None:
        self.assertEqual(
            f"{DEFAULT_REPOSITORY_URL}/bridge-cli-thin-client/latest/versions.txt",
            DEFAULT_REPOSITORY.latest_versions_url(thin_client=True),
        )

    def test_describe_mentions_source(self) -> None:
        self.assertIn(URL, DownloadFromCustomUrl(url=URL, version="1.0.0").describe())
        self.assertIn("1.0.0", DownloadFromCustomUrl(url=URL, version="1.0.0").describe())
        self.assertIn("cached", Skip().describe())


if __name__ == "__main__":
    unittest.main()
