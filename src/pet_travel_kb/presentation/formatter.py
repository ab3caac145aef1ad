"""Display formatting for resolved regulations."""

from dataclasses import dataclass, field
from html import escape
from typing import Any, Optional

from pydantic import BaseModel, Field

from pet_travel_kb.models import ResolvedRegulation

NO_STEPS_PLACEHOLDER = "目前沒有詳細步驟資料。"
DISCLAIMER = (
    "重要聲明：本資訊為參考原型，數據來源自試算表。"
    "請務必直接聯繫目的地的官方聯絡單位確認所有細節。"
)


class FormatterOptions(BaseModel):
    """Options for rendering a resolved regulation."""

    high_complexity_marker: str = Field(
        default="高", description="Complexity text containing this marker is flagged"
    )


@dataclass
class StepRow:
    """One row of the steps table. A placeholder row spans all columns."""

    order: str = ""
    text: str = ""
    timeframe: str = ""
    placeholder: bool = False


@dataclass
class RegulationView:
    """Display content for one resolved regulation."""

    title: str
    origin_display_name: str
    dest_display_name: str
    pet_label: str
    risk_level: str
    complexity: str
    complexity_flagged: bool
    preparation_time: str
    process_title: str
    step_rows: list[StepRow] = field(default_factory=list)
    requirements: list[str] = field(default_factory=list)
    contact: list[str] = field(default_factory=list)
    disclaimer: str = DISCLAIMER

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "title": self.title,
            "risk_level": self.risk_level,
            "complexity": self.complexity,
            "complexity_flagged": self.complexity_flagged,
            "preparation_time": self.preparation_time,
            "process_title": self.process_title,
            "steps": [
                {
                    "order": row.order,
                    "text": row.text,
                    "timeframe": row.timeframe,
                    "placeholder": row.placeholder,
                }
                for row in self.step_rows
            ],
            "requirements": self.requirements,
            "contact": self.contact,
            "disclaimer": self.disclaimer,
        }

    def to_html(self) -> str:
        """Render as an HTML fragment."""
        return render_html(self)

    def to_markdown(self) -> str:
        """Render as markdown."""
        lines = [
            f"# {self.title}",
            "",
            f"- **風險等級判定：** {self.risk_level}",
            f"- **複雜度：** {self.complexity}{' ⚠' if self.complexity_flagged else ''}",
            f"- **建議準備時間：** {self.preparation_time}",
            "",
            f"## A. 流程時程與步驟 ({self.process_title})",
            "",
            "| 步驟 | 內容/要求 | 時程/備註 |",
            "|------|-----------|-----------|",
        ]
        for row in self.step_rows:
            if row.placeholder:
                lines.append(f"| {row.text} | | |")
            else:
                lines.append(f"| {row.order}. | {row.text} | {row.timeframe} |")

        lines.extend(["", "## B. 官方檢疫規定重點", ""])
        lines.extend(f"- {item}" for item in self.requirements)
        lines.extend(["", "## C. 聯絡單位與重要連結", ""])
        lines.extend(f"- {item}" for item in self.contact)
        lines.extend(["", f"> {self.disclaimer}"])
        return "\n".join(lines)


def is_high_complexity(complexity: str, marker: str) -> bool:
    """Whether the complexity text contains the high-complexity marker."""
    if not marker:
        return False
    return marker.lower() in (complexity or "").lower()


def build_view(
    resolved: ResolvedRegulation,
    options: Optional[FormatterOptions] = None,
) -> RegulationView:
    """Build display content from a resolved regulation.

    Steps keep their stored order. A regulation without steps gets a single
    placeholder row.
    """
    options = options or FormatterOptions()
    regulation = resolved.regulation
    pet_label = resolved.pet_type.label

    step_rows = [
        StepRow(
            order="" if step.order is None else str(step.order),
            text=step.text,
            timeframe=step.timeframe,
        )
        for step in regulation.steps
    ]
    if not step_rows:
        step_rows = [StepRow(text=NO_STEPS_PLACEHOLDER, placeholder=True)]

    return RegulationView(
        title=(
            f"從 {resolved.origin_display_name} (分級: {resolved.risk_level.label}) "
            f"帶 {pet_label} 到 {resolved.dest_display_name} 的流程"
        ),
        origin_display_name=resolved.origin_display_name,
        dest_display_name=resolved.dest_display_name,
        pet_label=pet_label,
        risk_level=resolved.risk_level.label,
        complexity=resolved.complexity,
        complexity_flagged=is_high_complexity(
            resolved.complexity, options.high_complexity_marker
        ),
        preparation_time=resolved.preparation_time,
        process_title=regulation.process_title,
        step_rows=step_rows,
        requirements=list(regulation.requirements),
        contact=list(regulation.contact),
    )


def render_html(view: RegulationView) -> str:
    """Render a view as an HTML fragment with escaped text."""
    complexity_class = ' class="highlight-complexity"' if view.complexity_flagged else ""

    rows = []
    for row in view.step_rows:
        if row.placeholder:
            rows.append(f'<tr><td colspan="3">{escape(row.text)}</td></tr>')
        else:
            rows.append(
                f"<tr><td>{escape(row.order)}.</td>"
                f"<td>{escape(row.text)}</td>"
                f"<td>{escape(row.timeframe)}</td></tr>"
            )

    requirements = "".join(f"<li>{escape(item)}</li>" for item in view.requirements)
    contact = "".join(f"<li>{escape(item)}</li>" for item in view.contact)

    return "\n".join([
        f'<h2 class="result-title">從 <span class="highlight-country">{escape(view.origin_display_name)}</span>'
        f" (分級: {escape(view.risk_level)}) 帶 "
        f'<span class="highlight-pet">{escape(view.pet_label)}</span> 到 '
        f'<span class="highlight-country">{escape(view.dest_display_name)}</span> 的流程</h2>',
        '<div class="summary">',
        f"<p><strong>風險等級判定：</strong> {escape(view.risk_level)}</p>",
        f"<p><strong>複雜度：</strong><span{complexity_class}>{escape(view.complexity)}</span></p>",
        f'<p><strong>建議準備時間：</strong><span class="highlight-time">{escape(view.preparation_time)}</span></p>',
        "</div>",
        f"<h3>A. 流程時程與步驟 ({escape(view.process_title)})</h3>",
        '<table class="steps-table">',
        "<thead><tr><th>步驟</th><th>內容/要求</th><th>時程/備註</th></tr></thead>",
        f"<tbody>{''.join(rows)}</tbody>",
        "</table>",
        "<h3>B. 官方檢疫規定重點</h3>",
        f'<ul class="requirements-list">{requirements}</ul>',
        "<h3>C. 聯絡單位與重要連結</h3>",
        f'<ul class="contact-list">{contact}</ul>',
        f'<div class="disclaimer-note">{escape(view.disclaimer)}</div>',
    ])
