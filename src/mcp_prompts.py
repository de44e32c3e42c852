"""Prompt registry: canned user messages, rendered without any I/O."""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple


@dataclass(frozen=True)
class PromptSpec:
    name: str
    description: str
    arguments: Tuple[str, ...]
    template: str

    def render(self, **arguments: str) -> str:
        missing = [a for a in self.arguments if not arguments.get(a)]
        if missing:
            raise ValueError(f"Missing prompt arguments: {', '.join(missing)}")
        return self.template.format(**{a: arguments[a] for a in self.arguments})


PROMPTS: Mapping[str, PromptSpec] = MappingProxyType(
    {
        spec.name: spec
        for spec in (
            PromptSpec(
                name="analyze_package",
                description="Ask for an overall assessment of an npm package",
                arguments=("packageName",),
                template=(
                    "Analyze the npm package \"{packageName}\". Use get_package_info, "
                    "get_download_stats, get_package_quality and get_package_size to gather "
                    "facts, read its README with get_readme_data, and summarize what it does, "
                    "how widely it is used, how well it is maintained and what it costs to "
                    "include in a bundle."
                ),
            ),
            PromptSpec(
                name="compare_packages_prompt",
                description="Ask for a recommendation between two npm packages",
                arguments=("packageName1", "packageName2"),
                template=(
                    "Compare the npm packages \"{packageName1}\" and \"{packageName2}\". Start "
                    "with compare_packages, then check get_package_size and get_package_quality "
                    "for both. Recommend one of them and explain the trade-offs."
                ),
            ),
            PromptSpec(
                name="audit_dependencies",
                description="Ask for a review of a package's dependency footprint",
                arguments=("packageName",),
                template=(
                    "Review the dependencies of the npm package \"{packageName}\" using "
                    "get_package_dependencies. Point out heavy, outdated or loosely pinned "
                    "ranges and peer dependencies a consumer has to install themselves."
                ),
            ),
        )
    }
)
