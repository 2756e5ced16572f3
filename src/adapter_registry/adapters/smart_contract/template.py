"""
Template-based contract source generator.

Renders Solidity sources for a few standard contract kinds from
:class:`string.Template` snippets. The adapter generates source only; it does not
compile or deploy anything.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from logging import LoggerAdapter
from string import Template
from typing import Any, Dict, Mapping

from ...core.logging import get_logger
from ...core.schema import OptionField, OptionsSchema

CONTRACT_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

TEMPLATE_OPTIONS = OptionsSchema(
    fields={
        "license": OptionField("string", default="MIT", description="SPDX license identifier written in the header"),
        "solidity_version": OptionField("string", default="^0.8.20"),
        "metadata": OptionsSchema(
            optional=True,
            fields={
                "author": OptionField("string", description="Author recorded in the NatSpec header"),
                "url": OptionField("string", optional=True),
            },
        ),
    }
)

_HEADER = Template("// SPDX-License-Identifier: ${license}\npragma solidity ${solidity_version};\n\n${natspec}")

_TEMPLATES: Dict[str, Template] = {
    "erc20": Template(
        'import "@openzeppelin/contracts/token/ERC20/ERC20.sol";\n\n'
        "contract ${name} is ERC20 {\n"
        '    constructor() ERC20("${name}", "${symbol}") {\n'
        "        _mint(msg.sender, ${initial_supply} * 10 ** decimals());\n"
        "    }\n"
        "}\n"
    ),
    "erc721": Template(
        'import "@openzeppelin/contracts/token/ERC721/ERC721.sol";\n\n'
        "contract ${name} is ERC721 {\n"
        '    constructor() ERC721("${name}", "${symbol}") {}\n'
        "}\n"
    ),
}


@dataclass(slots=True)
class TemplateContractAdapter:
    """Contract generator backed by :class:`string.Template`."""

    name: str
    version: str
    license: str = "MIT"
    solidity_version: str = "^0.8.20"
    author: str | None = None
    url: str | None = None
    logger: LoggerAdapter = field(init=False, repr=False)
    _initialized: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = get_logger(self.__class__.__name__)

    @classmethod
    async def create(cls, *, name: str, version: str, options: Mapping[str, Any]) -> "TemplateContractAdapter":
        options = options or {}
        metadata = options.get("metadata") or {}
        adapter = cls(
            name=name,
            version=version,
            license=str(options.get("license") or "MIT"),
            solidity_version=str(options.get("solidity_version") or "^0.8.20"),
            author=metadata.get("author"),
            url=metadata.get("url"),
        )
        await adapter.initialize()
        return adapter

    async def initialize(self) -> None:
        self._initialized = True

    def is_initialized(self) -> bool:
        return self._initialized

    @staticmethod
    def supported_kinds() -> list[str]:
        return sorted(_TEMPLATES)

    async def generate(self, spec: Mapping[str, Any]) -> str:
        """
        Render contract source.

        Parameters
        ----------
        spec:
            Mapping with ``kind`` (``erc20`` or ``erc721``), ``name`` (a valid
            identifier), ``symbol`` and, for ERC-20, ``initial_supply``.
        """

        kind = str(spec.get("kind", "")).lower()
        template = _TEMPLATES.get(kind)
        if template is None:
            raise ValueError(f"invalid input: unsupported contract kind '{kind}', expected one of {', '.join(self.supported_kinds())}")

        contract_name = str(spec.get("name", ""))
        if not CONTRACT_NAME_PATTERN.match(contract_name):
            raise ValueError(f"invalid input: '{contract_name}' is not a valid contract name")

        initial_supply = spec.get("initial_supply", 0)
        if isinstance(initial_supply, bool) or not isinstance(initial_supply, int) or initial_supply < 0:
            raise ValueError(f"invalid input: initial_supply must be a non-negative integer, got {initial_supply!r}")

        natspec = ""
        if self.author:
            natspec = f"/// @author {self.author}\n"
            if self.url:
                natspec += f"/// @custom:url {self.url}\n"

        header = _HEADER.substitute(license=self.license, solidity_version=self.solidity_version, natspec=natspec)
        body = template.substitute(name=contract_name, symbol=str(spec.get("symbol") or contract_name[:4].upper()), initial_supply=initial_supply)
        self.logger.info("Generated contract source", extra={"kind": kind})
        return header + body


__all__ = ["TEMPLATE_OPTIONS", "TemplateContractAdapter"]
