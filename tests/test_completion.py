"""Tests for the chat model adapter."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from langchain_core.messages import AIMessage, HumanMessage

from agenda.config import Settings
from agenda.services.completion import CompletionService, build_chat_model


class TestBuildChatModel:
    def test_openai_provider(self):
        from langchain_openai import ChatOpenAI

        model = build_chat_model(Settings(api_key="sk-test", model_name="gpt-4o-mini"))
        assert isinstance(model, ChatOpenAI)

    def test_anthropic_provider(self):
        from langchain_anthropic import ChatAnthropic

        model = build_chat_model(
            Settings(api_key="sk-ant-test", llm_provider="anthropic", model_name="claude-haiku-4-5"),
        )
        assert isinstance(model, ChatAnthropic)


class TestCompletionService:
    def test_decide_binds_tools_with_auto_choice(self, completion, chat_model):
        tool = MagicMock()
        chat_model.bind_tools.return_value.invoke.return_value = AIMessage(content="hi")
        response = completion.decide([HumanMessage(content="oi")], [tool])
        assert response.content == "hi"
        chat_model.bind_tools.assert_called_once_with([tool], tool_choice="auto")

    def test_synthesize_sends_no_catalog_for_openai(self, completion, chat_model):
        chat_model.invoke.return_value = AIMessage(content="pronto")
        completion.synthesize([HumanMessage(content="oi")], [MagicMock()])
        chat_model.bind_tools.assert_not_called()
        chat_model.invoke.assert_called_once()

    @patch("agenda.services.completion.metrics")
    def test_records_success_metric(self, mock_metrics, completion, chat_model):
        chat_model.invoke.return_value = AIMessage(content="ok")
        completion.synthesize([HumanMessage(content="oi")], [])
        service, operation = mock_metrics.record_success.call_args[0]
        assert (service, operation) == ("openai", "synthesize")

    @patch("agenda.services.completion.metrics")
    def test_failure_is_recorded_and_reraised(self, mock_metrics, completion, chat_model):
        chat_model.bind_tools.return_value.invoke.side_effect = ConnectionError("down")
        with pytest.raises(ConnectionError):
            completion.decide([HumanMessage(content="oi")], [])
        assert mock_metrics.record_failure.call_args[1]["error_type"] == "ConnectionError"
