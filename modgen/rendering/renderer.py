"""Renders engine API bindings from Jinja templates."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from ..errors import RenderError, raise_if_cancelled
from ..logging import get_logger
from ..schema import EnumType, InputType, ObjectType, ScalarType, Schema, SchemaType, VisitHandlers
from ..workspace.prober import SourcePackage
from .funcs import TemplateFuncs

HEADER_SECTION = "header"
MODULE_SECTION = "module"

SECTION_TEMPLATES: Dict[str, str] = {
    HEADER_SECTION: "header.py.j2",
    "scalar": "scalar.py.j2",
    "object": "object.py.j2",
    "enum": "enum.py.j2",
    "input": "input.py.j2",
    MODULE_SECTION: "module.py.j2",
}


class TemplateRenderer:
    """Produces the raw, unformatted text of the generated bindings file.

    A directory passed as ``templates_dir`` is searched before the bundled
    templates, so a project can override any single section.
    """

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir
        self.logger = get_logger("renderer")

    def render(
        self,
        schema: Schema,
        *,
        package_name: str,
        module_path: str,
        module_name: str = "",
        source_dir: str = ".",
        source: Optional[SourcePackage] = None,
        cancel: object = None,
    ) -> str:
        """Render the header, one section per schema type and the module shim.

        Sections appear in visitation order: scalars, objects, enums, inputs,
        each sorted by name. The dispatch section is only rendered when
        ``module_name`` is set; ``source_dir`` is recorded there relative to
        the output directory.
        """
        funcs = TemplateFuncs(schema, module_name=module_name, source=source)
        env = self._create_env(funcs)
        is_module_code = bool(module_name)
        sections: List[str] = []

        sections.append(
            self._render_section(
                env,
                HEADER_SECTION,
                package_name=package_name,
                module_path=module_path,
            )
        )

        def emit(kind: str, item: SchemaType) -> None:
            raise_if_cancelled(cancel, "render")
            sections.append(
                self._render_section(env, kind, type=item, is_module_code=is_module_code)
            )

        def on_scalar(item: ScalarType) -> None:
            emit("scalar", item)

        def on_object(item: ObjectType) -> None:
            emit("object", item)

        def on_enum(item: EnumType) -> None:
            emit("enum", item)

        def on_input(item: InputType) -> None:
            emit("input", item)

        schema.visit(
            VisitHandlers(scalar=on_scalar, object=on_object, enum=on_enum, input=on_input)
        )

        if is_module_code:
            raise_if_cancelled(cancel, "render")
            sections.append(self._render_section(env, MODULE_SECTION, source_dir=source_dir))

        self.logger.debug("Rendered %d sections for %s", len(sections), package_name)
        return "\n\n".join(section.strip("\n") for section in sections) + "\n"

    def _render_section(self, env: Environment, section: str, **context: Any) -> str:
        name = SECTION_TEMPLATES[section]
        try:
            text = env.get_template(name).render(**context)
        except TemplateError as exc:
            raise RenderError(section, str(exc)) from exc
        if not text.strip():
            item = context.get("type")
            subject = f" for {item.name}" if item is not None else ""
            raise RenderError(section, f"empty output{subject}")
        return text

    def _create_env(self, funcs: TemplateFuncs) -> Environment:
        directories = []
        if self.templates_dir:
            directories.append(str(self.templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        env.filters.update(funcs.filters())
        env.globals.update(funcs.globals())
        return env


__all__ = ["SECTION_TEMPLATES", "TemplateRenderer"]
