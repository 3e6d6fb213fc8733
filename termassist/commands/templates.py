"""Command template engine.

Extracts {placeholder} parameters from a command template, detects which
placeholders are bound to a command-line flag, and rewrites the template
with collected values. An optional flag-bound parameter left empty takes
its flag with it, so ``git log --author={who}`` becomes ``git log``.
"""
import logging
import re
from dataclasses import dataclass
from typing import Callable, Mapping, Sequence

from .models import CommandParameter

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"\{([^{}]+)\}")

# Stands in for the escaped "{name}" inside FLAG_PATTERNS entries
_MARK = "<placeholder>"
_WHITESPACE_RE = re.compile(r"\s+")

# Flag names and suffixes stop at whitespace and braces so a pattern never
# spans a neighbouring placeholder
_TOKEN = r"[^\s{}]"


@dataclass(frozen=True)
class FlagPattern:
    """One flag syntax that can bind a placeholder.

    Attributes:
        style: Short name of the syntax.
        example: What the syntax looks like in a template.
        detect: Regex matching flag plus placeholder. The flag token is
            captured in the ``flag`` group.
        remove: Regex matching the same span plus surrounding whitespace.
    """

    style: str
    example: str
    detect: str
    remove: str

    def detect_re(self, name: str) -> re.Pattern:
        return re.compile(self.detect.replace(_MARK, re.escape(f"{{{name}}}")))

    def remove_re(self, name: str) -> re.Pattern:
        return re.compile(self.remove.replace(_MARK, re.escape(f"{{{name}}}")))


def _flag(style: str, example: str, body: str) -> FlagPattern:
    return FlagPattern(
        style=style,
        example=example,
        detect=body,
        remove=r"\s*" + body + r"\s*",
    )


# Most specific first. Removal applies every entry in this order, each to
# the output of the previous one, so compound values go before plain
# equals and the bare "--" separator goes before the long flag forms.
FLAG_PATTERNS: list[FlagPattern] = [
    _flag(
        "compound",
        "--flag={name}:suffix",
        rf"(?P<flag>--{_TOKEN}+)={_MARK}:{_TOKEN}+",
    ),
    _flag("long_equals", "--flag={name}", rf"(?P<flag>--{_TOKEN}+)={_MARK}"),
    _flag("java_property", "-Dflag={name}", rf"(?P<flag>-D{_TOKEN}+)={_MARK}"),
    _flag("colon", "-Flag:{name}", rf"(?P<flag>-{_TOKEN}+):{_MARK}"),
    _flag("double_dash", "-- {name}", rf"(?P<flag>--)\s+{_MARK}"),
    _flag("long_space", "--flag {name}", rf"(?P<flag>--{_TOKEN}+)\s+{_MARK}"),
    _flag("short_space", "-f {name}", rf"(?P<flag>-{_TOKEN})\s+{_MARK}"),
    _flag("windows", "/flag {name}", rf"(?P<flag>/{_TOKEN}+)\s+{_MARK}"),
]


def extract_parameter_names(template: str) -> list[str]:
    """Get distinct placeholder names in order of first appearance.

    Args:
        template: Command template, e.g. "grep {pattern} {file} {pattern}".

    Returns:
        Names without braces, e.g. ["pattern", "file"].
    """
    names: list[str] = []
    for match in PLACEHOLDER_RE.finditer(template):
        name = match.group(1)
        if name not in names:
            names.append(name)
    return names


def is_flag_parameter(name: str, template: str) -> bool:
    """Check if {name} is directly preceded by a recognized flag."""
    return any(p.detect_re(name).search(template) for p in FLAG_PATTERNS)


def find_flag_pattern(name: str, template: str) -> FlagPattern | None:
    """Get the first table entry binding {name}, or None."""
    return next(
        (p for p in FLAG_PATTERNS if p.detect_re(name).search(template)),
        None,
    )


def extract_flag_for_parameter(name: str, template: str) -> str:
    """Get the flag token bound to {name}.

    Returns:
        The flag (e.g. "--author"), or a generic description when the
        placeholder is not flag-bound.
    """
    for pattern in FLAG_PATTERNS:
        match = pattern.detect_re(name).search(template)
        if match:
            return match.group("flag")
    return f"flag for {{{name}}}"


def collapse_whitespace(text: str) -> str:
    """Collapse whitespace runs to one space and trim the ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def remove_flag_parameter(template: str, name: str) -> str:
    """Remove {name} together with the flag bound to it.

    Every removal pattern is applied in FLAG_PATTERNS order. Occurrences of
    {name} that no flag form accounts for are removed on their own.

    Returns:
        The rewritten template with whitespace collapsed.
    """
    result = template
    for pattern in FLAG_PATTERNS:
        result = pattern.remove_re(name).sub(" ", result)

    placeholder = f"{{{name}}}"
    if placeholder in result:
        logger.debug(f"No flag form left for {placeholder}, removing bare placeholder")
        # A separator left dangling by an earlier flag removal, as in
        # "-v {path}:{path}", goes with the placeholder.
        result = re.sub(
            r"\s*(?:(?<!\S)[:=])?" + re.escape(placeholder) + r"\s*", " ", result
        )

    return collapse_whitespace(result)


def substitute_parameters(
    template: str,
    parameters: Sequence[CommandParameter],
    values: Mapping[str, str],
) -> str:
    """Build the final command from a template and collected values.

    1. Optional flag-bound parameters with an empty (or missing) value are
       removed along with their flag.
    2. Every other declared placeholder is replaced with its value
       literally; a missing value counts as an empty string.
    3. Whitespace is collapsed.

    Placeholders without a declared parameter are left as literal text.
    Declared parameters that never occur in the template are ignored.
    """
    _log_ambiguities(template, parameters)

    result = template
    for param in parameters:
        value = values.get(param.name)
        if (
            param.optional
            and not (value or "").strip()
            and is_flag_parameter(param.name, template)
        ):
            result = remove_flag_parameter(result, param.name)

    for param in parameters:
        result = result.replace(f"{{{param.name}}}", values.get(param.name) or "")

    return collapse_whitespace(result)


def sync_parameters(
    template: str, existing: Sequence[CommandParameter] | None = None
) -> list[CommandParameter]:
    """Rebuild a parameter list to match the template's placeholders.

    Produces one entry per distinct placeholder, in order of first
    appearance. Description, default and optional flag are carried over
    from an existing entry of the same name.
    """
    by_name = {p.name: p for p in existing or []}
    synced = []
    for name in extract_parameter_names(template):
        previous = by_name.get(name)
        if previous:
            synced.append(
                CommandParameter(
                    name=name,
                    description=previous.description,
                    default_value=previous.default_value,
                    optional=previous.optional,
                )
            )
        else:
            synced.append(CommandParameter(name=name))
    return synced


def find_unused_parameters(
    template: str, parameters: Sequence[CommandParameter]
) -> list[str]:
    """Get declared parameter names that never occur in the template."""
    names = set(extract_parameter_names(template))
    return [p.name for p in parameters if p.name not in names]


def find_undeclared_placeholders(
    template: str, parameters: Sequence[CommandParameter]
) -> list[str]:
    """Get placeholder names that have no declared parameter."""
    declared = {p.name for p in parameters}
    return [n for n in extract_parameter_names(template) if n not in declared]


def highlight_parameters(
    template: str,
    parameters: Sequence[CommandParameter],
    fmt: Callable[[str], str],
) -> str:
    """Wrap each declared placeholder using fmt.

    Args:
        template: Command template.
        parameters: Declared parameters.
        fmt: Receives the placeholder text ("{name}") and returns its
            decorated form.
    """
    result = template
    for param in parameters:
        placeholder = f"{{{param.name}}}"
        result = result.replace(placeholder, fmt(placeholder))
    return result


def _log_ambiguities(
    template: str, parameters: Sequence[CommandParameter]
) -> None:
    unused = find_unused_parameters(template, parameters)
    if unused:
        logger.debug(f"Ignoring parameters not in template: {', '.join(unused)}")
    undeclared = find_undeclared_placeholders(template, parameters)
    if undeclared:
        logger.debug(f"Leaving undeclared placeholders as text: {', '.join(undeclared)}")
