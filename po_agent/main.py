"""po_agent.main

Wiring for settings + logging + catalog + session store + kernel/tools + agent,
and the uvicorn entry point.

Run:
  python -m po_agent.main
"""

from __future__ import annotations

import uvicorn
from fastapi import FastAPI

from po_agent.agent import PurchaseOrderAgent
from po_agent.api import Services, create_app
from po_agent.config import Settings
from po_agent.env_loader import load_env
from po_agent.kernel import Kernel
from po_agent.logging_utils import build_logger
from po_agent.storage.product_repository import JsonProductRepository
from po_agent.storage.state_store import InMemoryStateStore
from po_agent.tools.azure_openai_tool import AzureOpenAIChatService, build_llm_config
from po_agent.tools.check_compliance import CheckComplianceTool
from po_agent.tools.classify_intent import ClassifyIntentTool
from po_agent.tools.extract_details import ExtractDetailsTool
from po_agent.tools.justify_approval import JustifyApprovalTool
from po_agent.tools.show_products import ShowProductsTool
from po_agent.tools.validate_product import ValidateProductTool


def register_tools(kernel: Kernel, products: JsonProductRepository, logger) -> Kernel:
    for tool in (
        ClassifyIntentTool(logger),
        ValidateProductTool(logger),
        ExtractDetailsTool(products, logger),
        CheckComplianceTool(logger),
        JustifyApprovalTool(logger),
        ShowProductsTool(products, logger),
    ):
        kernel.add_plugin(tool)
    return kernel


def build_services() -> Services:
    load_env()  # load .env if present
    settings = Settings.load()
    logger = build_logger(settings.log_dir, level=settings.log_level)

    products = JsonProductRepository.from_file(settings.product_catalog_path)
    state_store = InMemoryStateStore(logger)

    settings.validate()
    chat_service = AzureOpenAIChatService(
        endpoint=settings.azure_openai_endpoint,
        chat_deployment=settings.azure_openai_chat_deployment,
        api_version=settings.azure_openai_api_version,
        logger=logger,
    )
    kernel = register_tools(Kernel(chat_service), products, logger)
    logger.info("Registered %d kernel functions", len(kernel.functions))

    llm_config = build_llm_config(
        endpoint=settings.azure_openai_endpoint,
        chat_deployment=settings.azure_openai_chat_deployment,
        api_version=settings.azure_openai_api_version,
    )
    agent = PurchaseOrderAgent(kernel, state_store, logger, llm_config, max_tool_rounds=settings.max_tool_rounds)
    return Services(settings=settings, logger=logger, agent=agent, state_store=state_store)


def build_app() -> FastAPI:
    return create_app(build_services())


def main() -> None:
    services = build_services()
    uvicorn.run(create_app(services), host=services.settings.api_host, port=services.settings.api_port)


if __name__ == "__main__":
    main()
