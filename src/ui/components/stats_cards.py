"""Stats display components: headline cards, weekly chart, leaderboards, activity feed."""

import streamlit as st

from src.services.dashboard import Card, DayActivity

_ACTIVITY_LABELS = {
    "recording": "recorded a sentence",
    "review": "reviewed a recording",
    "user_joined": "joined",
}


def render_cards(cards: list[Card]) -> None:
    for col, card in zip(st.columns(len(cards)), cards, strict=True):
        col.metric(card.title, card.value)
        if card.caption:
            col.caption(card.caption)


def render_weekly_activity(days: list[DayActivity]) -> None:
    """Bar chart of the last seven days plus the week's totals."""
    if not any(d.contributions for d in days):
        st.info("No activity in the last 7 days. Start contributing to see your activity here!")
        return
    st.bar_chart({d.label: d.contributions for d in days})
    total = sum(d.contributions for d in days)
    average = round(sum(d.percentage for d in days) / len(days))
    rising = sum(1 for d in days if d.trend == "up")
    c1, c2, c3 = st.columns(3)
    c1.metric("This week", total)
    c2.metric("Daily goal (avg)", f"{average}%")
    c3.metric("Days trending up", rising)


def render_leaderboard(title: str, ranked: list[dict], key: str, value_label: str) -> None:
    """Ranked users with the stat named by *key*."""
    st.subheader(title)
    if not ranked:
        st.caption("No entries yet.")
        return
    for i, entry in enumerate(ranked, start=1):
        user = entry["user"]
        name = user.get("name") or user["email"]
        st.markdown(f"{i}. **{name}**: {entry['stats'].get(key, 0)} {value_label}")


def render_activity_feed(items: list[dict]) -> None:
    if not items:
        st.caption("No recent activity.")
        return
    for item in items:
        user = item["user"]
        name = user.get("name") or user["email"]
        action = _ACTIVITY_LABELS.get(item["type"], item["type"])
        when = item["timestamp"][:16].replace("T", " ")
        detail = item.get("data", {}).get("sentence")
        line = f"**{name}** {action} · {when}"
        if detail:
            line += f"  \n_{detail}_"
        st.markdown(line)
