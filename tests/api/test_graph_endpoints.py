"""
Integration tests for Graph API endpoints.

Tests the visible and full graph, facet options, statistics and refresh.
"""

import asyncio
import inspect

import httpx
import pytest
from unittest.mock import patch

from member_graph.repository import AssociationAPI
from member_graph.services import ServiceContext, RelationGraphService


class TestGraph:
    """Tests for graph retrieval."""

    @pytest.mark.api
    def test_visible_graph(self, api_client, mock_services):
        """Test the visible graph with default filters."""
        with patch("api.deps.get_services", return_value=mock_services):
            response = api_client.get("/api/v1/graph")

        assert response.status_code == 200
        data = response.json()
        assert data["total_nodes"] == 6
        assert data["total_edges"] == 4
        assert data["filters"]["view_mode"] == "network"

        node = next(n for n in data["nodes"] if n["id"] == "alice@cjd.test")
        assert node["label"] == "Alice Test"
        assert node["data"]["node_type"] == "member"
        assert node["data"]["member"]["company"] == "Acme"

    @pytest.mark.api
    def test_visible_graph_follows_filters(self, api_client, mock_services):
        """Test the visible graph reflects the shared filters."""
        mock_services.graph.update_filters(lambda f: f.update_member_status_filter("inactive"))

        with patch("api.deps.get_services", return_value=mock_services):
            response = api_client.get("/api/v1/graph")

        ids = {n["id"] for n in response.json()["nodes"]}
        assert ids == {"chloe@cjd.test", "patron-p1", "patron-p2"}

    @pytest.mark.api
    def test_full_graph(self, api_client, mock_services):
        """Test the full graph ignores filters and patrons."""
        mock_services.graph.update_filters(lambda f: f.update_search_query("zzz"))

        with patch("api.deps.get_services", return_value=mock_services):
            response = api_client.get("/api/v1/graph/full")

        assert response.status_code == 200
        data = response.json()
        assert data["total_nodes"] == 4
        assert data["total_edges"] == 3

        edge = next(e for e in data["edges"] if e["id"] == "alice@cjd.test-bruno@cjd.test")
        assert edge["label"] == "sponsor"
        assert edge["size"] == 2
        assert edge["data"]["relation_type"] == "sponsor"


class TestOptions:
    """Tests for facet options."""

    @pytest.mark.api
    def test_options(self, api_client, mock_services):
        """Test options list every facet value."""
        with patch("api.deps.get_services", return_value=mock_services):
            response = api_client.get("/api/v1/graph/options")

        assert response.status_code == 200
        data = response.json()
        assert data["companies"] == ["Acme", "Beta", "Corp", "Delta"]
        assert data["cjd_roles"] == ["member", "president", "treasurer"]
        assert data["sectors"] == ["Industry", "Software"]


class TestStats:
    """Tests for graph statistics."""

    @pytest.mark.api
    def test_visible_stats(self, api_client, mock_services):
        """Test statistics of the visible graph."""
        with patch("api.deps.get_services", return_value=mock_services):
            response = api_client.get("/api/v1/graph/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["scope"] == "visible"
        assert data["nodes_by_type"] == {"member": 4, "patron": 2}

    @pytest.mark.api
    def test_full_stats(self, api_client, mock_services):
        """Test statistics of the full graph."""
        with patch("api.deps.get_services", return_value=mock_services):
            response = api_client.get("/api/v1/graph/stats?scope=full")

        data = response.json()
        assert data["scope"] == "full"
        assert data["total_nodes"] == 4
        assert data["edges_by_type"] == {"sponsor": 1, "team": 1, "custom": 1}

    @pytest.mark.api
    def test_invalid_scope(self, api_client, mock_services):
        """Test an unknown scope is rejected."""
        with patch("api.deps.get_services", return_value=mock_services):
            response = api_client.get("/api/v1/graph/stats?scope=everything")

        assert response.status_code == 400
        assert "Invalid scope" in response.json()["detail"]


class TestRefresh:
    """Tests for snapshot refresh."""

    @pytest.mark.api
    def test_refresh(self, api_client, mock_services, mock_association_api):
        """Test a refresh reloads the snapshot."""
        with patch("api.deps.get_services", return_value=mock_services):
            response = api_client.post("/api/v1/graph/refresh")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["members"] == 4
        assert data["patrons"] == 2
        assert mock_association_api.get_members.call_count == 2

    @pytest.mark.api
    def test_refresh_api_failure(self, api_client, mock_services, mock_association_api):
        """Test an association API failure returns 502."""
        mock_association_api.get_members.side_effect = RuntimeError("success=false")

        with patch("api.deps.get_services", return_value=mock_services):
            response = api_client.post("/api/v1/graph/refresh")

        assert response.status_code == 502
        assert "association API" in response.json()["detail"]

    @pytest.mark.api
    def test_refresh_transport_failure(self, api_client, mock_services, mock_association_api):
        """Test a transport error returns 502."""
        mock_association_api.get_relations.side_effect = httpx.ConnectError("refused")

        with patch("api.deps.get_services", return_value=mock_services):
            response = api_client.post("/api/v1/graph/refresh")

        assert response.status_code == 502

    @pytest.mark.api
    def test_refresh_invalid_upstream_item(self, api_client, mock_services, test_config):
        """Test a relation with an unknown type returns 502 and keeps the snapshot."""
        def handler(request):
            if request.url.path == "/api/admin/relations":
                data = [{
                    "id": "r1",
                    "memberEmail": "a@cjd.test",
                    "relatedMemberEmail": "b@cjd.test",
                    "relationType": "friend",
                }]
            elif request.url.path == "/api/admin/members":
                data = [{"id": 1, "email": "a@cjd.test", "firstName": "A", "lastName": "Test"}]
            else:
                data = []
            return httpx.Response(200, json={"success": True, "data": data})

        association_api = AssociationAPI(test_config.repository, transport=httpx.MockTransport(handler))
        service = RelationGraphService(ServiceContext(config=test_config, api=association_api))
        mock_services.graph = service

        with patch("api.deps.get_services", return_value=mock_services):
            response = api_client.post("/api/v1/graph/refresh")

        assert response.status_code == 502
        assert "/api/admin/relations" in response.json()["detail"]
        assert service.snapshot.members == ()

    @pytest.mark.api
    def test_refresh_runs_in_threadpool(self):
        """Test the refresh endpoint is a sync handler."""
        from api.v1.graph import refresh_graph

        assert not inspect.iscoroutinefunction(refresh_graph)


class TestScheduledRefresh:
    """Tests for the background refresh job."""

    @pytest.mark.api
    def test_job_refreshes_snapshot(self, mock_services, mock_association_api):
        """Test the job reloads the snapshot."""
        from api.main import refresh_graph_snapshot

        with patch("api.main.get_services", return_value=mock_services):
            asyncio.run(refresh_graph_snapshot())

        assert mock_association_api.get_members.call_count == 2

    @pytest.mark.api
    def test_job_failure_keeps_snapshot(self, mock_services, mock_association_api):
        """Test a failing refresh keeps the previous snapshot."""
        from api.main import refresh_graph_snapshot

        before = mock_services.graph.snapshot
        mock_association_api.get_relations.side_effect = RuntimeError("API down")

        with patch("api.main.get_services", return_value=mock_services):
            asyncio.run(refresh_graph_snapshot())

        assert mock_services.graph.snapshot is before
