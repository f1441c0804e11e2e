"""
Tests del contrato compartido de manejo de peticiones.
Verifica ruteo, validación, envelope de error y liberación de conexiones.
"""

import json
from datetime import timedelta
from unittest.mock import Mock

import pytest

from conftest import InMemoryTaskStore
from core.application.handle_request import TaskRequestHandler
from core.application.responses import CorsPolicy
from core.application.validate_request import RawRequest
from core.domain.errors import StoreConnectionError, StoreError
from core.domain.ports.error_reporter import ErrorReporter


def _released_once(store: InMemoryTaskStore) -> bool:
    return all(conn.release_count == 1 for conn in store.connections)


class TestRouting:
    def test_options_responde_200_sin_tocar_el_store(self, call, store):
        response = call("OPTIONS")

        assert response.status_code == 200
        assert response.body == ""
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert store.acquire_count == 0
        assert store.queries == []

    def test_options_en_cualquier_ruta(self, call, store):
        response = call("OPTIONS", "/cualquier/cosa")

        assert response.status_code == 200
        assert store.acquire_count == 0

    @pytest.mark.parametrize("path", ["/", "/task", "/tasks/1", "/health", "/unknown"])
    def test_ruta_desconocida_devuelve_404(self, call, store, path):
        response = call("GET", path)

        assert response.status_code == 404
        assert response.json()["code"] == "ROUTE_NOT_FOUND"
        assert response.json()["details"]["availableRoutes"] == ["/tasks"]
        assert store.acquire_count == 0

    @pytest.mark.parametrize("method", ["DELETE", "PUT", "PATCH", "HEAD"])
    def test_metodo_no_soportado_devuelve_405(self, call, store, method):
        response = call(method)

        assert response.status_code == 405
        assert response.json()["code"] == "METHOD_NOT_ALLOWED"
        assert response.headers["Allow"] == "GET, POST, OPTIONS"
        assert store.acquire_count == 0

    def test_todas_las_respuestas_son_json_con_cors(self, call):
        for response in (call("GET"), call("POST", body="{"), call("GET", "/x")):
            assert response.headers["Content-Type"] == "application/json"
            assert "Access-Control-Allow-Methods" in response.headers

    def test_cors_usa_el_origin_configurado(self, store):
        handler = TaskRequestHandler(
            store=store, cors=CorsPolicy(allow_origin="https://app.example.com")
        )

        response = handler.handle(RawRequest("OPTIONS", "/tasks"), "req-1")

        assert response.headers["Access-Control-Allow-Origin"] == "https://app.example.com"
        assert response.headers["Access-Control-Allow-Credentials"] == "true"


class TestCreateAndList:
    def test_post_crea_tarea(self, call):
        response = call("POST", body=json.dumps({"description": "buy milk"}))

        assert response.status_code == 201
        payload = response.json()
        assert payload["id"] == 1
        assert payload["description"] == "buy milk"
        assert payload["created_at"].startswith("2026-01-01T12:00:01")

    def test_get_sin_tareas_devuelve_lista_vacia(self, call):
        response = call("GET")

        assert response.status_code == 200
        assert response.json() == []

    def test_get_tras_n_creaciones_ordena_por_fecha_desc(self, call):
        for description in ("uno", "dos", "tres"):
            call("POST", body=json.dumps({"description": description}))

        response = call("GET")

        assert response.status_code == 200
        assert [t["description"] for t in response.json()] == ["tres", "dos", "uno"]

    def test_get_con_timestamps_empatados_no_falla(self):
        store = InMemoryTaskStore(tick=timedelta(0))
        handler = TaskRequestHandler(store=store)
        for description in ("a", "b"):
            handler.handle(RawRequest("POST", "/tasks", json.dumps({"description": description})), "r")

        response = handler.handle(RawRequest("GET", "/tasks"), "r")

        assert response.status_code == 200
        rows = response.json()
        assert len(rows) == 2
        assert rows[0]["created_at"] == rows[1]["created_at"]

    def test_esquema_se_inicializa_una_sola_vez(self, call, store):
        call("GET")
        call("GET")
        call("POST", body=json.dumps({"description": "x"}))

        assert store.queries.count("table_exists") == 1
        assert store.queries.count("create_table") == 1
        assert _released_once(store)


class TestValidation:
    def test_json_invalido_devuelve_400_invalid_json(self, call, store):
        response = call("POST", body="invalid json")

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_JSON"
        assert store.acquire_count == 0

    @pytest.mark.parametrize(
        "body",
        [
            None,
            "",
            "{}",
            '{"description": ""}',
            '{"description": "   "}',
            '{"description": null}',
            '{"description": 5}',
            '{"title": "solo titulo"}',
            "[]",
            '"texto"',
        ],
    )
    def test_sin_description_devuelve_400_missing_fields(self, call, store, body):
        response = call("POST", body=body)

        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_FIELDS"
        assert response.json()["details"]["required"] == ["description"]
        assert store.acquire_count == 0

    def test_envelope_de_error_completo(self, call):
        payload = call("POST", body="{").json()

        assert payload["error"] == "Invalid JSON in request body"
        assert payload["message"]
        assert payload["code"] == "INVALID_JSON"
        assert payload["requestId"] == "req-1"
        assert payload["timestamp"]


class TestStoreFailures:
    @pytest.mark.parametrize("method, body", [("GET", None), ("POST", '{"description": "x"}')])
    def test_conexion_rechazada_devuelve_500(self, call, store, method, body):
        store.acquire_error = StoreConnectionError("connection refused")

        response = call(method, body=body)

        assert response.status_code == 500
        assert response.json()["code"] == "DB_CONNECTION_ERROR"
        assert response.json()["message"] == "connection refused"
        assert store.acquire_count == 0

    def test_fallo_en_list_libera_conexion_una_vez(self, call, store):
        store.failures["list"] = StoreError("canceling statement", code="57014")

        response = call("GET")

        assert response.status_code == 500
        assert response.json()["code"] == "57014"
        assert store.acquire_count == 1
        assert _released_once(store)

    def test_fallo_en_create_libera_conexion_una_vez(self, call, store):
        store.failures["create"] = StoreError("server closed the connection")

        response = call("POST", body='{"description": "x"}')

        assert response.status_code == 500
        assert response.json()["code"] == "DB_ERROR"
        assert _released_once(store)

    def test_fallo_del_esquema_devuelve_db_init_error(self, call, store):
        store.failures["table_exists"] = StoreError("permission denied")

        response = call("GET")

        assert response.status_code == 500
        assert response.json()["code"] == "DB_INIT_ERROR"
        assert _released_once(store)

    def test_excepcion_inesperada_devuelve_500_sin_stack_trace(self, call, store):
        store.failures["list"] = RuntimeError("boom")

        response = call("GET")

        assert response.status_code == 500
        payload = response.json()
        assert payload["code"] == "INTERNAL_ERROR"
        assert payload["message"] == "boom"
        assert "Traceback" not in response.body
        assert _released_once(store)

    def test_error_al_liberar_no_rompe_la_respuesta(self, call, store):
        store.release_error = RuntimeError("release failed")

        response = call("GET")

        assert response.status_code == 200
        assert store.connections[0].release_count == 1


class TestDiagnostics:
    @pytest.fixture
    def reporter(self):
        return Mock(spec=ErrorReporter)

    @pytest.fixture
    def handler(self, store, reporter):
        return TaskRequestHandler(store=store, reporter=reporter)

    def test_errores_de_servidor_se_reportan(self, handler, store, reporter):
        store.failures["create"] = StoreError("disk full", code="53100")

        handler.handle(
            RawRequest("POST", "/tasks", '{"description": "x", "password": "p"}'), "req-9"
        )

        reporter.report.assert_called_once()
        error, context = reporter.report.call_args.args
        assert isinstance(error, StoreError)
        assert context["requestId"] == "req-9"
        assert context["route"] == "POST /tasks"
        assert context["code"] == "53100"
        assert context["params"]["description"] == "x"

    def test_errores_de_cliente_no_se_reportan(self, handler, reporter):
        handler.handle(RawRequest("POST", "/tasks", "{"), "r")
        handler.handle(RawRequest("GET", "/nope"), "r")

        reporter.report.assert_not_called()

    def test_reporter_que_falla_no_altera_la_respuesta(self, store):
        class BrokenReporter(ErrorReporter):
            def capture(self, error, context):
                raise RuntimeError("sink caído")

        store.failures["list"] = StoreError("down")
        handler = TaskRequestHandler(store=store, reporter=BrokenReporter())

        response = handler.handle(RawRequest("GET", "/tasks"), "r")

        assert response.status_code == 500
        assert response.json()["code"] == "DB_ERROR"
