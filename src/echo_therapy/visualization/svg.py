"""
SVG serialization of a mood flower Scene.

The output is the stable drawing surface handed to snapshot/export
collaborators: a 300x300 viewBox centred on the flower origin.
"""

from xml.sax.saxutils import quoteattr

from echo_therapy.visualization.engine import Scene, format_number


VIEWBOX = "-150 -150 300 300"
PETAL_OPACITY = 0.7


def render_svg(scene: Scene, size: int = 320) -> str:
    """
    Render a scene as a standalone SVG document.

    Calm cores carry an <animate> element so the pulse keeps running in a
    browser; everything else is drawn at the scene's instant.
    """
    color = scene.config.base_color
    center = scene.center

    lines = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{size}" height="{size}" '
        f'viewBox="{VIEWBOX}" overflow="visible">',
        "  <defs>",
        '    <radialGradient id="centerGrad">',
        '      <stop offset="0%" stop-color="#FFF" stop-opacity="1"/>',
        f'      <stop offset="100%" stop-color={quoteattr(color)} stop-opacity="0.2"/>',
        "    </radialGradient>",
        "  </defs>",
        f'  <g transform="scale({format_number(scene.scale)}) rotate({format_number(scene.rotation)})">',
    ]

    if center.pulses:
        r0, r1 = format_number(center.base_radius), format_number(center.pulse_radius)
        lines.append(f'    <circle r="{format_number(center.radius)}" fill="url(#centerGrad)">')
        lines.append(
            f'      <animate attributeName="r" values="{r0};{r1};{r0}" '
            f'dur="{format_number(center.pulse_period)}s" repeatCount="indefinite"/>'
        )
        lines.append("    </circle>")
    else:
        lines.append(f'    <circle r="{format_number(center.radius)}" fill="url(#centerGrad)"/>')

    for petal in scene.petals:
        lines.append(
            f'    <path d="{petal.path}" fill={quoteattr(color)} '
            f'fill-opacity="{PETAL_OPACITY}" transform="{petal.transform}"/>'
        )

    for particle in scene.particles:
        lines.append(
            f'    <circle cx="{format_number(particle.cx)}" cy="{format_number(particle.cy)}" '
            f'r="{format_number(particle.r)}" fill={quoteattr(color)}/>'
        )

    lines.append("  </g>")
    lines.append("</svg>")
    return "\n".join(lines) + "\n"
