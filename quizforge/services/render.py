"""HTML widgets for quiz questions and collection of submitted answers.

Every question becomes a card whose inputs are named after the question id,
so a submitted form maps straight back onto an AnswerState. Rendering is a
pure function of (quiz, answers): calling it again yields a complete
replacement, never an addition to earlier output.
"""
from __future__ import annotations

import re
from typing import Mapping, Optional

from markupsafe import Markup, escape
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import TextLexer, get_lexer_by_name
from pygments.util import ClassNotFound

from ..schemas import (
    AnswerState,
    AnswerValue,
    FillBlankQuestion,
    IdentificationQuestion,
    MatchingQuestion,
    MCQQuestion,
    Quiz,
)
from .scoring import normalize_answer

CODE_BLOCK = re.compile(r"```(\w+)?\n([\s\S]*?)```")
BLOCK_MATH = re.compile(r"\\\[([\s\S]*?)\\\]")
INLINE_MATH = re.compile(r"\\\(([\s\S]*?)\\\)")

MATCH_SEP = "::"

_formatter = HtmlFormatter(cssclass="code-window")


def highlight_css() -> str:
    return _formatter.get_style_defs(".code-window")


def _lexer(language: Optional[str]):
    if not language:
        return TextLexer()
    try:
        return get_lexer_by_name(language)
    except ClassNotFound:
        return TextLexer()


def render_latex(text: str) -> Markup:
    """Escape prose, then mark LaTeX spans for the browser-side KaTeX pass."""
    html = str(escape(text))
    html = BLOCK_MATH.sub(
        lambda m: f'<span class="math" data-display="true">{m.group(1).strip()}</span>', html
    )
    html = INLINE_MATH.sub(
        lambda m: f'<span class="math" data-display="false">{m.group(1).strip()}</span>', html
    )
    return Markup(html)


def render_code(code: str, language: Optional[str]) -> Markup:
    return Markup(highlight(code, _lexer(language), _formatter))


def render_rich_text(text: str) -> Markup:
    """Prose with LaTeX plus fenced code blocks; LaTeX is never applied to code."""
    if not text:
        return Markup("")
    out = []
    last = 0
    for m in CODE_BLOCK.finditer(text):
        prose = text[last:m.start()]
        if prose.strip():
            out.append(Markup("<p>{}</p>").format(render_latex(prose)))
        out.append(render_code(m.group(2), m.group(1)))
        last = m.end()
    tail = text[last:]
    if tail.strip():
        out.append(Markup("<p>{}</p>").format(render_latex(tail)))
    return Markup("").join(out)


# ---------- widgets ----------

def _mcq_body(q: MCQQuestion, answer: Optional[AnswerValue]) -> Markup:
    choices = Markup("").join(
        Markup(
            '<label class="choice"><input type="radio" name="{}" value="{}"{}/>'
            "<span>{}</span></label>"
        ).format(q.id, idx, Markup(" checked") if answer == idx else "", render_rich_text(choice))
        for idx, choice in enumerate(q.choices)
    )
    return Markup(
        '<div class="question-prompt">{}</div><div class="choice-list">{}</div>'
    ).format(render_rich_text(q.prompt), choices)


def _text_body(q, answer: Optional[AnswerValue]) -> Markup:
    value = answer if isinstance(answer, str) else ""
    return Markup(
        '<div class="question-prompt">{}</div>'
        '<input class="text-input" type="text" name="{}" value="{}" placeholder="Type your answer"/>'
    ).format(render_rich_text(q.prompt), q.id, value)


def matching_options(q: MatchingQuestion) -> list:
    # every right value is offered on every row; sorted so position gives nothing away
    return sorted((p.right for p in q.pairs), key=lambda r: (normalize_answer(r), r))


def _matching_body(q: MatchingQuestion, answer: Optional[AnswerValue]) -> Markup:
    selected = answer if isinstance(answer, dict) else {}
    options = matching_options(q)
    rows = []
    for idx, pair in enumerate(q.pairs):
        current = selected.get(str(idx), "")
        marked = False
        opts = [Markup('<option value="">Select</option>')]
        for right in options:
            is_selected = not marked and bool(current) and right == current
            marked = marked or is_selected
            opts.append(
                Markup('<option value="{}"{}>{}</option>').format(
                    right, Markup(" selected") if is_selected else "", right
                )
            )
        rows.append(
            Markup(
                '<div class="match-row"><div class="match-left">{}</div>'
                '<select class="match-select" name="{}" data-match-index="{}">{}</select></div>'
            ).format(render_rich_text(pair.left), f"{q.id}{MATCH_SEP}{idx}", idx, Markup("").join(opts))
        )
    return Markup(
        '<div class="question-prompt">Match the items:</div><div class="match-grid">{}</div>'
    ).format(Markup("").join(rows))


def render_question(question, index: int, answer: Optional[AnswerValue] = None) -> Markup:
    if isinstance(question, MCQQuestion):
        body = _mcq_body(question, answer)
    elif isinstance(question, (FillBlankQuestion, IdentificationQuestion)):
        body = _text_body(question, answer)
    elif isinstance(question, MatchingQuestion):
        body = _matching_body(question, answer)
    else:
        raise TypeError(f"Unsupported question type: {type(question).__name__}")
    return Markup(
        '<div class="question-card" data-question-id="{}">'
        '<div class="question-header"><span class="question-index">{}</span></div>'
        '<div class="question-body">{}</div></div>'
    ).format(question.id, index + 1, body)


def render_quiz(quiz: Quiz, answers: Optional[AnswerState] = None) -> Markup:
    answers = answers or {}
    return Markup("").join(
        render_question(q, i, answers.get(q.id)) for i, q in enumerate(quiz.questions)
    )


# ---------- answer collection ----------

def collect_answer(question, form: Mapping[str, str]) -> Optional[AnswerValue]:
    """Answer value for one question from submitted form fields, or None."""
    if isinstance(question, MCQQuestion):
        raw = form.get(question.id)
        try:
            idx = int(raw)
        except (TypeError, ValueError):
            return None
        return idx if 0 <= idx < len(question.choices) else None
    if isinstance(question, (FillBlankQuestion, IdentificationQuestion)):
        value = form.get(question.id)
        return value if isinstance(value, str) else None
    if isinstance(question, MatchingQuestion):
        matches = {}
        for idx in range(len(question.pairs)):
            value = form.get(f"{question.id}{MATCH_SEP}{idx}")
            if isinstance(value, str):
                matches[str(idx)] = value
        return matches or None
    raise TypeError(f"Unsupported question type: {type(question).__name__}")


def collect_answers(quiz: Quiz, form: Mapping[str, str]) -> AnswerState:
    answers: AnswerState = {}
    for q in quiz.questions:
        value = collect_answer(q, form)
        if value is not None:
            answers[q.id] = value
    return answers
