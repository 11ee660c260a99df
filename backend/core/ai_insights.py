"""
ai_insights.py — Safe AI-assisted progress narratives.

Design:
- Never compute metrics, trends or projections via AI.
- Always derive numbers from the deterministic analysis.
- Use AI only to explain, simplify, and encourage.
- Gracefully fall back to deterministic templates when AI is disabled/unavailable.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List

import httpx
import numpy as np

from core.analysis import AnalysisResult
from core.metrics import METRIC_POLICIES, Trend
from core.narrative import narrate_progress_summary

logger = logging.getLogger(__name__)

SUMMARY_LIST_FIELDS = ("strengths", "concerns", "recommendations")

# Structured-output schema the model must answer with.
SUMMARY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "summary": {"type": "string"},
        **{name: {"type": "array", "items": {"type": "string"}} for name in SUMMARY_LIST_FIELDS},
    },
    "required": ["summary", *SUMMARY_LIST_FIELDS],
}


def _round(val: Any) -> Any:
    if val is None:
        return None
    v = float(val)
    if np.isnan(v) or np.isinf(v):
        return None
    return round(v, 2)


def _summary_metrics(result: AnalysisResult) -> Dict[str, Any]:
    """Compact, number-only view of an analysis for prompting and display."""
    metrics: List[Dict[str, Any]] = []
    for metric, trend in result.metrics.items():
        policy = METRIC_POLICIES[metric]
        metrics.append({
            "metric": metric.value,
            "label": policy.label,
            "unit": policy.unit,
            "current_value": _round(trend.current_value),
            "previous_value": _round(trend.previous_value),
            "delta": _round(trend.delta),
            "trend": trend.trend.value,
            "projection_12_weeks": _round(trend.projection.weeks_12),
        })
    return {
        "student_name": result.student_name,
        "goal": result.goal,
        "assessment_date": result.assessment_date,
        "days_since_previous": result.days_since_previous,
        "metrics": metrics,
    }


def _deterministic_summary(result: AnalysisResult) -> Dict[str, Any]:
    summary = narrate_progress_summary(
        result.student_name,
        result.goal,
        result.assessment_date,
        result.days_since_previous,
        result.count(Trend.IMPROVING),
        result.count(Trend.WORSENING),
    )
    return {
        "mode": "deterministic",
        "summary": summary,
        "strengths": list(result.insights.positives),
        "concerns": list(result.insights.negatives),
        "recommendations": list(result.insights.recommendations),
        "metrics": _summary_metrics(result),
    }


def _call_openai_summary(result: AnalysisResult) -> Dict[str, Any]:
    api_key = os.getenv("OPENAI_API_KEY", "").strip()
    model = os.getenv("OPENAI_MODEL", "gpt-4o-mini").strip()
    timeout_s = float(os.getenv("AI_TIMEOUT_SECONDS", "20"))
    temperature = float(os.getenv("AI_TEMPERATURE", "0.2"))
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY is not set.")

    metrics = _summary_metrics(result)
    system_prompt = (
        "Você é um assistente de personal trainer. Explique a evolução física do aluno em "
        "português simples e motivador. Não invente números; use apenas as métricas fornecidas. "
        "Retorne JSON estrito com as chaves: summary, strengths, concerns, recommendations."
    )
    user_prompt = (
        "Crie um resumo curto da evolução a partir destas métricas:\n"
        f"{json.dumps(metrics, ensure_ascii=False)}\n\n"
        "Restrições:\n"
        "- summary: no máximo 90 palavras\n"
        "- strengths: 1-3 itens\n"
        "- concerns: 1-3 itens\n"
        "- recommendations: exatamente 3 itens\n"
        "- mencione o objetivo do aluno uma vez\n"
    )

    payload = {
        "model": model,
        "input": [
            {"role": "system", "content": [{"type": "input_text", "text": system_prompt}]},
            {"role": "user", "content": [{"type": "input_text", "text": user_prompt}]},
        ],
        "temperature": temperature,
        "text": {
            "format": {
                "type": "json_schema",
                "name": "progress_summary",
                "schema": SUMMARY_SCHEMA,
                "strict": True,
            }
        },
    }

    with httpx.Client(timeout=timeout_s) as client:
        res = client.post(
            "https://api.openai.com/v1/responses",
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            json=payload,
        )
        res.raise_for_status()
        data = res.json()

    text = (data.get("output_text") or "").strip()
    if not text:
        raise RuntimeError("Empty AI response.")

    parsed = json.loads(text)
    out: Dict[str, Any] = {"mode": "ai_openai", "summary": parsed.get("summary", "")}
    for name in SUMMARY_LIST_FIELDS:
        out[name] = list(parsed.get(name) or [])[:3]
    out["metrics"] = metrics
    return out


def generate_progress_summary(result: AnalysisResult) -> Dict[str, Any]:
    """
    Public entrypoint for the AI-assisted progress summary.

    Behavior:
    - If AI is disabled/misconfigured/fails, return deterministic fallback.
    - If AI is enabled + configured, return AI narrative with deterministic metrics attached.
    """
    ai_enabled = os.getenv("AI_ENABLED", "false").strip().lower() in {"1", "true", "yes", "on"}
    provider = os.getenv("AI_PROVIDER", "openai").strip().lower()

    if not ai_enabled:
        return _deterministic_summary(result)

    try:
        if provider == "openai":
            return _call_openai_summary(result)
        return _deterministic_summary(result)
    except (httpx.HTTPError, RuntimeError, ValueError) as exc:
        logger.warning("AI summary failed, using deterministic fallback: %s", exc)
        fallback = _deterministic_summary(result)
        fallback["mode"] = "deterministic_fallback"
        fallback["ai_error"] = str(exc)
        return fallback
