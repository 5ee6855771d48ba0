"""Tests for the NetworkBuilder class."""

import pytest


class TestNetworkBuilder:
    """Test cases for NetworkBuilder.build_network."""

    def test_unreachable_reference_dropped(self, paper, repository):
        """R cites A and B; B cannot be fetched, so only R -> A remains."""
        from citation_explorer.network_builder import NetworkBuilder

        repo = repository(
            [
                paper("R", year=2020, references=["A", "B"]),
                paper("A", year=2020),
                paper("B", year=2019),
            ],
            failing=["B"],
        )
        builder = NetworkBuilder(repo)
        network = builder.build_network("R", max_depth=1)

        assert [p.identifier for p in network.papers] == ["R", "A"]
        assert network.links == [("R", "A")]
        assert "B" not in network
        assert set(builder.unavailable) == {"B"}

    def test_depth_zero_returns_root_only(self, paper, repository):
        from citation_explorer.network_builder import NetworkBuilder

        repo = repository([paper("R", references=["A"]), paper("A")])
        network = NetworkBuilder(repo).build_network("R", max_depth=0)

        assert [p.identifier for p in network.papers] == ["R"]
        assert network.links == []
        assert dict(repo.calls) == {"R": 1}

    def test_root_failure_is_fatal(self, repository):
        from citation_explorer.exceptions import RootUnavailableError, TransportError
        from citation_explorer.network_builder import NetworkBuilder

        repo = repository([], failing=["R"])

        with pytest.raises(RootUnavailableError) as excinfo:
            NetworkBuilder(repo).build_network("R", max_depth=2)

        assert excinfo.value.identifier == "R"
        assert isinstance(excinfo.value.cause, TransportError)

    def test_root_not_found_is_fatal(self, repository):
        from citation_explorer.exceptions import NotFoundError, RootUnavailableError
        from citation_explorer.network_builder import build_network

        with pytest.raises(RootUnavailableError) as excinfo:
            build_network(repository([]), "missing", max_depth=1)

        assert isinstance(excinfo.value.cause, NotFoundError)

    def test_negative_depth_rejected(self, paper, repository):
        from citation_explorer.network_builder import NetworkBuilder

        with pytest.raises(ValueError):
            NetworkBuilder(repository([paper("R")])).build_network("R", max_depth=-1)

    def test_malformed_records_treated_as_unavailable(self, paper, repository):
        from citation_explorer.exceptions import MalformedRecordError
        from citation_explorer.network_builder import NetworkBuilder

        repo = repository([paper("R", references=["A", "M"]), paper("A")], malformed=["M"])
        builder = NetworkBuilder(repo)
        network = builder.build_network("R", max_depth=1)

        assert [p.identifier for p in network.papers] == ["R", "A"]
        assert isinstance(builder.unavailable["M"], MalformedRecordError)

    def test_unexpected_repository_error_treated_as_unavailable(self, paper, repository):
        from citation_explorer.exceptions import FetchError
        from citation_explorer.network_builder import NetworkBuilder

        def explode(identifier):
            if identifier == "B":
                raise KeyError("citationCount")

        repo = repository([paper("R", references=["A", "B"]), paper("A"), paper("B")], on_fetch=explode)
        builder = NetworkBuilder(repo)
        network = builder.build_network("R", max_depth=1)

        assert [p.identifier for p in network.papers] == ["R", "A"]
        assert isinstance(builder.unavailable["B"], FetchError)
        assert isinstance(builder.unavailable["B"].__cause__, KeyError)

    def test_unexpected_root_error_is_fatal(self, repository):
        from citation_explorer.exceptions import RootUnavailableError
        from citation_explorer.network_builder import NetworkBuilder

        def explode(identifier):
            raise RuntimeError("bad payload")

        with pytest.raises(RootUnavailableError):
            NetworkBuilder(repository([], on_fetch=explode)).build_network("R", max_depth=1)

    def test_badly_typed_payload_skipped(self):
        """A related paper whose citationCount is not a number does not abort the build."""
        import requests
        from unittest.mock import MagicMock, patch

        from citation_explorer.client import SemanticScholarClient
        from citation_explorer.exceptions import MalformedRecordError
        from citation_explorer.network_builder import NetworkBuilder

        payloads = {
            "R": {"paperId": "R", "title": "Root", "year": 2020,
                  "references": [{"paperId": "A"}, {"paperId": "B"}]},
            "A": {"paperId": "A", "title": "Good", "year": 2019},
            "B": {"paperId": "B", "title": "Bad", "year": 2018, "citationCount": "n/a"},
        }

        def get(url, params=None, timeout=None):
            response = MagicMock()
            response.status_code = 200
            response.json.return_value = payloads[url.rsplit("/", 1)[1]]
            return response

        client = SemanticScholarClient(session=requests.Session())
        with patch.object(client.session, "get", side_effect=get):
            builder = NetworkBuilder(client)
            network = builder.build_network("R", max_depth=1)

        assert [p.identifier for p in network.papers] == ["R", "A"]
        assert isinstance(builder.unavailable["B"], MalformedRecordError)

    def test_alias_of_known_paper_not_refetched(self, paper, repository):
        """X resolves to A; once seen, X is not requested again at the next level."""
        from citation_explorer.network_builder import NetworkBuilder

        known = paper("A", cited_by=["X"])
        repo = repository([paper("R", references=["A", "X"]), known])
        repo.papers["X"] = known

        network = NetworkBuilder(repo).build_network("R", max_depth=2)

        assert [p.identifier for p in network.papers] == ["R", "A"]
        assert repo.calls["X"] == 1

    def test_expands_citers_and_references_per_level(self, paper, repository):
        from citation_explorer.network_builder import NetworkBuilder

        repo = repository([
            paper("R", references=["A"], cited_by=["D"]),
            paper("A", references=["C"], cited_by=["R"]),
            paper("D", references=["R"]),
            paper("C", cited_by=["A"]),
        ])

        shallow = NetworkBuilder(repo).build_network("R", max_depth=1)
        assert [p.identifier for p in shallow.papers] == ["R", "D", "A"]
        assert shallow.links == [("R", "D"), ("R", "A")]

        deep = NetworkBuilder(repo).build_network("R", max_depth=2)
        assert [p.identifier for p in deep.papers] == ["R", "D", "A", "C"]
        assert ("A", "C") in deep.links

    def test_cycles_do_not_duplicate_nodes(self, paper, repository):
        from citation_explorer.network_builder import NetworkBuilder

        repo = repository([
            paper("R", references=["A"], cited_by=["B"]),
            paper("A", references=["B"], cited_by=["R"]),
            paper("B", references=["R"], cited_by=["A"]),
        ])
        network = NetworkBuilder(repo).build_network("R", max_depth=5)

        identifiers = [p.identifier for p in network.papers]
        assert sorted(identifiers) == ["A", "B", "R"]
        assert len(identifiers) == len(set(identifiers))
        assert all(count == 1 for count in repo.calls.values())

    def test_shared_related_paper_fetched_once(self, paper, repository):
        """X is listed by both level-1 papers; the first one in order links it."""
        from citation_explorer.network_builder import NetworkBuilder

        repo = repository([
            paper("R", references=["A", "B"]),
            paper("A", references=["X"]),
            paper("B", references=["X"]),
            paper("X"),
        ])
        network = NetworkBuilder(repo).build_network("R", max_depth=2)

        assert repo.calls["X"] == 1
        assert ("A", "X") in network.links
        assert ("B", "X") not in network.links

    def test_failed_paper_not_refetched(self, paper, repository):
        from citation_explorer.network_builder import NetworkBuilder

        repo = repository(
            [
                paper("R", references=["A", "F"]),
                paper("A", references=["F"]),
            ],
            failing=["F"],
        )
        builder = NetworkBuilder(repo)
        builder.build_network("R", max_depth=3)

        assert repo.calls["F"] == 1
        assert builder.fetch_count == 2

    def test_links_reference_known_papers(self, paper, repository):
        from citation_explorer.network_builder import NetworkBuilder

        repo = repository(
            [
                paper("R", references=["A", "B", "C"], cited_by=["D"]),
                paper("A", references=["E"]),
                paper("B", cited_by=["F"]),
                paper("D"),
                paper("E"),
            ],
            failing=["C", "F"],
        )
        network = NetworkBuilder(repo, max_workers=2).build_network("R", max_depth=2)

        for source, target in network.links:
            assert source in network and target in network

    def test_cancel_discards_batch(self, paper, repository):
        from citation_explorer.exceptions import BuildCancelledError
        from citation_explorer.network_builder import NetworkBuilder

        builder = None

        def cancel_on_related(identifier):
            if identifier != "R":
                builder.cancel()

        repo = repository(
            [paper("R", references=["A"]), paper("A")],
            on_fetch=cancel_on_related,
        )
        builder = NetworkBuilder(repo)

        with pytest.raises(BuildCancelledError):
            builder.build_network("R", max_depth=1)

        assert [p.identifier for p in builder.network.papers] == ["R"]

    def test_builder_is_single_use(self, paper, repository):
        from citation_explorer.network_builder import NetworkBuilder

        builder = NetworkBuilder(repository([paper("R")]))
        builder.build_network("R", max_depth=0)

        with pytest.raises(RuntimeError):
            builder.build_network("R", max_depth=0)
