"""Subject and bodies of the mails sent to subscribers."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

from markupsafe import Markup

from bolao.models.draw import Draw
from bolao.models.pool import Pool
from bolao.services.hit_matcher import ACHIEVEMENT_TITLES, Achievement, MatchResult, hit_label

_ACHIEVEMENT_EMOJI = {
    Achievement.SENA: "🏆",
    Achievement.QUINA: "🥳",
    Achievement.QUADRA: "🎉",
}


@dataclass(frozen=True)
class MessageContent:
    subject: str
    text: str
    html: str


def _pool_heading(pool: Pool) -> tuple[str, str]:
    title = pool.display_name
    subtitle = pool.id if pool.has_custom_name else ""
    return title, subtitle


def results_subject(pool: Pool, match: MatchResult) -> str:
    return f"{pool.display_name} {match.max_hits} acertos"


def results_text(pool: Pool, draw: Draw, match: MatchResult) -> str:
    title, subtitle = _pool_heading(pool)
    lines = [f"Resultados do seu bolão {title}" + (f" (ID {subtitle})" if subtitle else "")]
    lines.append(f"Concurso {draw.number} ({draw.draw_date})")
    lines.append(f"Dezenas: {' '.join(draw.numbers)}")

    if match.achievement is not None:
        emoji = _ACHIEVEMENT_EMOJI[match.achievement]
        title_line = ACHIEVEMENT_TITLES[match.achievement]
        lines.append("")
        lines.append(f"{emoji} {title_line} Seu melhor jogo teve {match.max_hits} acertos.")

    lines.append("")
    lines.append("Jogos:")
    if not match.games:
        lines.append("- Nenhum jogo cadastrado.")
    for game in match.games:
        star = "⭐ " if match.achievement is not None and game.hit_count == match.max_hits else ""
        lines.append(f"{star}- {' '.join(game.numbers)} ({game.hit_count} acertos)")

    return "\n".join(lines)


def _badge(number: str, active: bool) -> Markup:
    style = "background:#16a34a;color:#fff;" if active else "background:#f3f4f6;color:#111827;"
    return Markup(
        '<span style="display:inline-block;margin:2px 4px;padding:6px 10px;'
        'border-radius:999px;font-size:12px;{}">{}</span>'
    ).format(style, number)


def results_html(pool: Pool, draw: Draw, match: MatchResult) -> str:
    title, subtitle = _pool_heading(pool)
    drawn = set(draw.numbers)

    rows = []
    for game in match.games:
        badges = Markup("").join(_badge(n, n in drawn) for n in game.numbers)
        highlight = match.achievement is not None and game.hit_count == match.max_hits
        weight = "font-weight:700;" if highlight else ""
        rows.append(
            Markup(
                '<tr><td style="padding:12px 0;border-bottom:1px solid #e5e7eb;">'
                "<div>{}</div><strong style=\"{}\">{} acertos</strong> "
                '<span style="color:#6b7280;">{}</span></td></tr>'
            ).format(badges, weight, game.hit_count, hit_label(game.hit_count))
        )
    if not rows:
        rows.append(Markup('<tr><td style="color:#6b7280;">Nenhum jogo cadastrado para este bolão.</td></tr>'))

    banner = Markup("")
    if match.achievement is not None:
        banner = Markup("<p><strong>{} {}</strong> Seu melhor jogo teve {} acertos.</p>").format(
            _ACHIEVEMENT_EMOJI[match.achievement],
            ACHIEVEMENT_TITLES[match.achievement],
            match.max_hits,
        )

    drawn_badges = Markup("").join(_badge(n, True) for n in draw.numbers)
    subtitle_html = Markup('<div style="font-size:12px;color:#6b7280;">ID {}</div>').format(subtitle) if subtitle else ""

    return str(
        Markup(
            '<div style="font-family:Arial,sans-serif;">'
            "<h1>Resultados do seu bolão</h1>"
            "<p>O resultado do concurso <strong>{}</strong> já está disponível.</p>"
            "{}"
            "<div>Dezenas sorteadas</div><div>{}</div>"
            "<div>Apuração em {}</div>"
            "<h2>{}</h2>{}"
            '<table style="width:100%;border-collapse:collapse;"><tbody>{}</tbody></table>'
            "<p>Você está recebendo este email porque confirmou o acompanhamento deste bolão.</p>"
            "</div>"
        ).format(
            draw.number,
            banner,
            drawn_badges,
            draw.draw_date,
            title,
            subtitle_html,
            Markup("").join(rows),
        )
    )


def results_message(pool: Pool, draw: Draw, match: MatchResult) -> MessageContent:
    return MessageContent(
        subject=results_subject(pool, match),
        text=results_text(pool, draw, match),
        html=results_html(pool, draw, match),
    )


def share_link(share_base_url: str, pool: Pool) -> str:
    return f"{share_base_url.rstrip('/')}/api/pools/{quote(pool.id)}"


def admin_link(share_base_url: str, pool: Pool) -> str:
    return f"{share_link(share_base_url, pool)}?token={quote(pool.edit_token)}"


def confirmation_link(share_base_url: str, pool: Pool, token: str) -> str:
    return f"{share_link(share_base_url, pool)}/confirm?token={quote(token)}"


def verification_message(pool: Pool, link: str) -> MessageContent:
    title, subtitle = _pool_heading(pool)
    suffix = f" (ID {subtitle})" if subtitle else ""
    html = Markup(
        '<div style="font-family:Arial,sans-serif;">'
        "<h1>Confirme seu email</h1>"
        "<p>Clique no link abaixo para confirmar que você quer acompanhar o {}{}.</p>"
        '<p><a href="{}">Confirmar assinatura</a></p>'
        "<p>Ou copie e cole este link no navegador:<br />{}</p>"
        "</div>"
    ).format(title, suffix, link, link)
    return MessageContent(
        subject=f"Confirme seu email para acompanhar o {title}",
        text=f"Confirme seu email para acompanhar o {title}{suffix}: {link}",
        html=str(html),
    )



def smtp_check_message() -> MessageContent:
    text = "Este é um email de teste enviado pelo sistema."
    return MessageContent(
        subject="Teste de email - Bolão Mega-Sena",
        text=text,
        html=str(Markup("<p>{}</p>").format(text)),
    )
