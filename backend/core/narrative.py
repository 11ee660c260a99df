"""
narrative.py — Template-based sentences for progress insights.

Turns metric trends into the short Portuguese sentences shown to trainers and
students. Plain f-string templates, no AI involved.
"""

from typing import Callable, Dict

from core.analyzer import MetricTrend
from core.metrics import Metric


# ── Positive observations ───────────────────────────────────────────

POSITIVE_TEMPLATES: Dict[Metric, Callable[[MetricTrend], str]] = {
    Metric.WEIGHT: lambda m: (
        f"Peso teve mudança de {m.delta:.1f}kg ({m.delta_percentage:.1f}%)"
    ),
    Metric.BMI: lambda m: f"IMC melhorou em {abs(m.delta):.1f} pontos",
    Metric.BODY_FAT: lambda m: f"Percentual de gordura reduziu {abs(m.delta):.1f}%",
    Metric.MUSCLE_MASS: lambda m: f"Massa muscular aumentou {m.delta:.1f}%",
    Metric.WAIST_CIRC: lambda m: f"Circunferência da cintura reduziu {abs(m.delta):.1f}cm",
    Metric.HIP_CIRC: lambda m: f"Circunferência do quadril reduziu {abs(m.delta):.1f}cm",
    Metric.RESTING_HR: lambda m: (
        f"Frequência cardíaca em repouso melhorou {abs(m.delta):.0f} bpm"
    ),
}


# ── Negative observations ───────────────────────────────────────────

NEGATIVE_TEMPLATES: Dict[Metric, Callable[[MetricTrend], str]] = {
    Metric.WEIGHT: lambda m: (
        f"Peso teve alteração de {m.delta:.1f}kg que pode precisar de atenção"
    ),
    Metric.BMI: lambda m: f"IMC aumentou {m.delta:.1f} pontos",
    Metric.BODY_FAT: lambda m: f"Percentual de gordura aumentou {m.delta:.1f}%",
    Metric.MUSCLE_MASS: lambda m: f"Massa muscular reduziu {abs(m.delta):.1f}%",
    Metric.WAIST_CIRC: lambda m: f"Circunferência da cintura aumentou {m.delta:.1f}cm",
    Metric.HIP_CIRC: lambda m: f"Circunferência do quadril aumentou {m.delta:.1f}cm",
    Metric.RESTING_HR: lambda m: (
        f"Frequência cardíaca em repouso aumentou {m.delta:.0f} bpm"
    ),
}


def narrate_improvement(trend: MetricTrend) -> str:
    return POSITIVE_TEMPLATES[trend.metric](trend)


def narrate_decline(trend: MetricTrend) -> str:
    return NEGATIVE_TEMPLATES[trend.metric](trend)


# ── Recommendation library ──────────────────────────────────────────

RECOMMENDATIONS = {
    "body_fat_worsening": (
        "Considere ajustar a dieta para um déficit calórico controlado",
        "Aumente a intensidade ou frequência dos exercícios cardiovasculares",
    ),
    "muscle_mass_worsening": (
        "Intensifique o treinamento de força com exercícios compostos",
        "Verifique se a ingestão de proteínas está adequada (1.6-2.2g/kg)",
    ),
    "resting_hr_worsening": (
        "Inclua mais atividades cardiovasculares de baixa intensidade",
        "Monitore o estresse e qualidade do sono",
    ),
    "goal_loss": (
        "Mantenha consistência no déficit calórico de 300-500 kcal/dia",
        "Combine treino de força com atividades cardiovasculares",
    ),
    "goal_gain": (
        "Mantenha superávit calórico controlado de 200-400 kcal/dia",
        "Priorize exercícios compostos e progressão de carga",
    ),
    "general": (
        "Mantenha hidratação adequada (35ml/kg de peso corporal)",
        "Garanta 7-9 horas de sono de qualidade por noite",
        "Monitore o progresso semanalmente, mas avalie mensalmente",
    ),
}


# Sections are never shown empty; these fill them up to the minimum.
FILLER_POSITIVE = "Mantendo consistência no programa de treinamento."
FILLER_NEGATIVE = "Alguns indicadores podem precisar de atenção especial."
FILLER_RECOMMENDATION = "Continue seguindo o plano de treino e alimentação."


def narrate_progress_summary(
    name: str, goal: str, assessment_date: str, days_since_previous, improving: int, worsening: int
) -> str:
    """One-paragraph overview used by the deterministic summary and reports."""
    parts = [f"{name or 'Aluno'} tem como objetivo: {goal}."]
    if days_since_previous is not None:
        parts.append(
            f"Avaliação de {assessment_date}, {days_since_previous} dia(s) após a avaliação anterior."
        )
    else:
        parts.append(f"Avaliação de {assessment_date}, sem avaliação anterior para comparação.")
    parts.append(
        f"{improving} indicador(es) em melhora e {worsening} que merece(m) atenção."
    )
    return " ".join(parts)
