from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Iterable, Optional

import streamlit as st

from config import STATUS_ANSWERED


@dataclass(frozen=True)
class StatusTone:
    name: str
    icon: str


STATUS_TONES = {
    "info": StatusTone("info", "ℹ️"),
    "success": StatusTone("success", "✅"),
    "warning": StatusTone("warning", "⚠️"),
    "error": StatusTone("error", "🚨"),
}

APP_CSS = """
<style>
  .ec-hero { padding: 1.5rem 0 0.5rem 0; text-align: center; }
  .ec-hero h1 { font-size: 2.6rem; margin-bottom: 0.25rem; }
  .ec-subtitle { color: #6b7280; font-size: 1.1rem; }
  .ec-gradient { background: linear-gradient(90deg, #2563eb, #7c3aed); -webkit-background-clip: text; color: transparent; }
  .ec-section { margin: 1.25rem 0 0.5rem 0; }
  .ec-section h2 { font-size: 1.5rem; margin-bottom: 0.1rem; }
  .ec-section p { color: #6b7280; margin: 0; }
  .ec-eyebrow { text-transform: uppercase; letter-spacing: 0.08em; font-size: 0.75rem; color: #2563eb; }
  .ec-card { border: 1px solid #e5e7eb; border-radius: 0.75rem; padding: 1rem 1.25rem; background: #ffffff; }
  .ec-empty { display: flex; gap: 1rem; align-items: center; justify-content: center; text-align: center; padding: 2.5rem 1rem; }
  .ec-empty-icon { font-size: 2.5rem; }
  .ec-empty h3 { margin: 0 0 0.25rem 0; }
  .ec-empty p { color: #6b7280; margin: 0; }
  .ec-callout { border-left: 4px solid #2563eb; background: #eff6ff; padding: 0.75rem 1rem; border-radius: 0.5rem; margin: 0.5rem 0; }
  .ec-callout-success { border-color: #16a34a; background: #f0fdf4; }
  .ec-callout-warning { border-color: #d97706; background: #fffbeb; }
  .ec-callout-error { border-color: #dc2626; background: #fef2f2; }
  .ec-callout p { margin: 0.25rem 0 0 0; }
  .ec-badge { display: inline-block; padding: 0.1rem 0.6rem; border-radius: 999px; font-size: 0.8rem; font-weight: 600; }
  .ec-badge-pending { background: #fff7ed; color: #c2410c; }
  .ec-badge-answered { background: #dcfce7; color: #15803d; }
  .ec-meta { color: #6b7280; font-size: 0.85rem; }
  .ec-meta strong { color: #2563eb; }
  .ec-text { white-space: pre-wrap; line-height: 1.55; margin: 0.4rem 0; }
  .ec-answer { background: #f0fdf4; border: 1px solid #bbf7d0; border-radius: 0.5rem; padding: 0.75rem 1rem; margin-top: 0.5rem; }
  .ec-stat { border: 1px solid #e5e7eb; border-radius: 0.75rem; padding: 1rem 1.25rem; }
  .ec-stat-value { font-size: 1.8rem; font-weight: 700; }
  .ec-stat-label { color: #6b7280; font-size: 0.9rem; }
  .ec-avatar { display: inline-flex; width: 2rem; height: 2rem; border-radius: 999px; background: #dbeafe; color: #1d4ed8;
               align-items: center; justify-content: center; font-size: 0.75rem; font-weight: 700; margin-right: 0.5rem; }
  .ec-loading { text-align: center; padding: 4rem 0; color: #6b7280; font-size: 1.1rem; }
  .ec-footer { text-align: center; color: #9ca3af; font-size: 0.85rem; padding: 2rem 0 1rem 0; }
</style>
"""


def _tone(kind: str) -> StatusTone:
    return STATUS_TONES.get(kind, STATUS_TONES["info"])


def _esc(value: object) -> str:
    return html.escape(str(value or ""))


def inject_css() -> None:
    st.markdown(APP_CSS, unsafe_allow_html=True)


def render_page_header(title: str, subtitle: str | None = None, *, gradient: bool = False) -> None:
    title_html = f"<span class='ec-gradient'>{_esc(title)}</span>" if gradient else _esc(title)
    subtitle_html = f"<p class='ec-subtitle'>{_esc(subtitle)}</p>" if subtitle else ""
    st.markdown(
        f"""
        <div class="ec-hero">
          <h1>{title_html}</h1>
          {subtitle_html}
        </div>
        """,
        unsafe_allow_html=True,
    )


def render_section_header(title: str, description: str | None = None, eyebrow: str | None = None) -> None:
    eyebrow_html = f"<span class='ec-eyebrow'>{_esc(eyebrow)}</span>" if eyebrow else ""
    description_html = f"<p>{_esc(description)}</p>" if description else ""
    st.markdown(
        f"""
        <div class="ec-section">
          {eyebrow_html}
          <h2>{_esc(title)}</h2>
          {description_html}
        </div>
        """,
        unsafe_allow_html=True,
    )


def render_callout(title: str, body: str, *, kind: str = "info") -> None:
    tone = _tone(kind)
    st.markdown(
        f"""
        <div class="ec-callout ec-callout-{tone.name}">
          <strong>{tone.icon} {_esc(title)}</strong>
          <p>{_esc(body)}</p>
        </div>
        """,
        unsafe_allow_html=True,
    )


def render_empty_state(title: str, body: str, *, icon: str = "💬") -> None:
    st.markdown(
        f"""
        <div class="ec-card ec-empty">
          <div class="ec-empty-icon">{icon}</div>
          <div>
            <h3>{_esc(title)}</h3>
            <p>{_esc(body)}</p>
          </div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def render_loading(message: str = "Loading...") -> None:
    st.markdown(f"<div class='ec-loading'>📘 {_esc(message)}</div>", unsafe_allow_html=True)


def status_badge_html(status: str, *, pending_label: str = "Pending") -> str:
    if status == STATUS_ANSWERED:
        return "<span class='ec-badge ec-badge-answered'>✅ Answered</span>"
    return f"<span class='ec-badge ec-badge-pending'>🕒 {_esc(pending_label)}</span>"


def render_meta_line(badge_html: str, label: str, value: str) -> None:
    st.markdown(
        f"{badge_html} &nbsp; <span class='ec-meta'>{_esc(label)} <strong>{_esc(value)}</strong></span>",
        unsafe_allow_html=True,
    )


def render_text_block(text: str, *, caption: Optional[str] = None, answer: bool = False) -> None:
    """User-written text, escaped and with line breaks kept."""
    caption_html = f"<div class='ec-meta'>{_esc(caption)}</div>" if caption else ""
    css = "ec-answer" if answer else ""
    st.markdown(
        f"<div class='{css}'><div class='ec-text'>{_esc(text)}</div>{caption_html}</div>",
        unsafe_allow_html=True,
    )


def render_stat_cards(stats: Iterable[tuple[str, object, str]]) -> None:
    """stats: (label, value, colour) triples rendered side by side."""
    items = list(stats)
    if not items:
        return
    cols = st.columns(len(items))
    for col, (label, value, colour) in zip(cols, items):
        with col:
            st.markdown(
                f"""
                <div class="ec-stat">
                  <div class="ec-stat-value" style="color:{colour}">{_esc(value)}</div>
                  <div class="ec-stat-label">{_esc(label)}</div>
                </div>
                """,
                unsafe_allow_html=True,
            )


def avatar_html(initials: str) -> str:
    return f"<span class='ec-avatar'>{_esc(initials)}</span>"


def render_footer(text: str) -> None:
    st.markdown(f"<div class='ec-footer'>{_esc(text)}</div>", unsafe_allow_html=True)
