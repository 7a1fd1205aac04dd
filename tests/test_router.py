import asyncio
import json

import httpx
import pytest

from codex_client.client import CompletionClient
from codex_client.contracts import Err, GenerationParams, Ok
from codex_client.errors import ParsingError, TransportError
from codex_client.router import ResultRouter
from codex_client.surfaces import Span, TextDocument, Workspace


def test_replace_substitutes_span_and_keeps_surroundings():
    workspace = Workspace()
    doc = TextDocument("foo bar baz")
    router = ResultRouter(workspace)

    router.to_replace(doc, Span(4, 7))(Ok("REPLACED"))

    assert doc.text == "foo REPLACED baz"
    assert workspace.errors == []


def test_replace_with_shorter_text():
    doc = TextDocument("foo bar baz")
    ResultRouter(Workspace()).to_replace(doc, Span(4, 7))(Ok("b"))
    assert doc.text == "foo b baz"


def test_replace_error_leaves_document_untouched():
    notified = []
    workspace = Workspace(notify=notified.append)
    doc = TextDocument("foo bar baz")

    ResultRouter(workspace).to_replace(doc, Span(4, 7))(Err(ParsingError("Missing choices.")))

    assert doc.text == "foo bar baz"
    assert workspace.errors == ["ParsingError: Missing choices."]
    assert notified == ["ParsingError: Missing choices."]


def test_replace_into_closed_document_is_a_no_op():
    workspace = Workspace()
    doc = TextDocument("foo bar baz")
    continuation = ResultRouter(workspace).to_replace(doc, Span(4, 7))
    doc.close()

    continuation(Ok("REPLACED"))

    assert doc.text == "foo bar baz"
    assert workspace.errors == []


def test_replace_reports_span_that_no_longer_fits():
    workspace = Workspace()
    doc = TextDocument("foo bar baz")
    continuation = ResultRouter(workspace).to_replace(doc, Span(4, 11))
    doc.text = "foo"

    continuation(Ok("REPLACED"))

    assert doc.text == "foo"
    assert len(workspace.errors) == 1
    assert workspace.errors[0].startswith("StaleTargetError:")


def test_interactive_display_fills_panel_and_reveals_it():
    workspace = Workspace()
    router = ResultRouter(workspace, panel_name="*results*")

    router.to_display(interactive=True)(Ok("an explanation"))

    panel = workspace.find_panel("*results*")
    assert panel is not None
    assert panel.text == "an explanation"
    assert panel.read_only
    assert panel.visible


def test_programmatic_display_does_not_reveal_panel():
    workspace = Workspace()
    router = ResultRouter(workspace)

    router.to_display(interactive=False)(Ok("quiet"))

    panel = workspace.panel(router.panel_name)
    assert panel.text == "quiet"
    assert not panel.visible


def test_display_replaces_previous_contents():
    workspace = Workspace()
    router = ResultRouter(workspace)
    router.to_display()(Ok("first"))
    router.to_display()(Ok("second"))
    assert workspace.panel(router.panel_name).text == "second"


def test_display_error_goes_to_error_channel_only():
    workspace = Workspace()
    router = ResultRouter(workspace)
    router.to_display()(Ok("keep me"))

    router.to_display()(Err(TransportError("Completion request timed out.")))

    assert workspace.panel(router.panel_name).text == "keep me"
    assert workspace.errors == ["TransportError: Completion request timed out."]


def test_display_into_killed_panel_is_a_no_op():
    workspace = Workspace()
    router = ResultRouter(workspace)
    continuation = router.to_display()
    killed = workspace.panel(router.panel_name)
    killed.kill()

    continuation(Ok("late"))

    assert killed.text == ""
    assert workspace.find_panel(router.panel_name) is None
    assert workspace.panel(router.panel_name) is not killed


@pytest.mark.asyncio
@pytest.mark.parametrize("release_order", [("a", "b"), ("b", "a")])
async def test_concurrent_display_results_last_arrival_wins(release_order):
    gates = {"a": asyncio.Event(), "b": asyncio.Event()}

    async def handler(request: httpx.Request) -> httpx.Response:
        prompt = json.loads(request.content.decode("utf-8"))["prompt"]
        await gates[prompt].wait()
        return httpx.Response(200, json={"choices": [{"text": f"result {prompt}"}]})

    workspace = Workspace()
    router = ResultRouter(workspace)
    params = GenerationParams(model="m")
    client = CompletionClient(
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        endpoint_url="https://example.test/v1/completions",
    )
    try:
        tasks = {
            "a": client.query("a", params, "sk-test", router.to_display()),
            "b": client.query("b", params, "sk-test", router.to_display()),
        }
        for name in release_order:
            gates[name].set()
            await tasks[name]
    finally:
        await client.close()

    assert workspace.panel(router.panel_name).text == f"result {release_order[-1]}"
