"""po_agent.kernel

Tool plugins for the AutoGen (AG2) agent pair.

- Tool classes mark methods with `@kernel_function`; `Kernel.add_plugin` collects them
  under `<Plugin>.<function>`.
- `register_with(caller, executor)` hands every function to `autogen.register_function`.
  AutoGen builds the tool schema from the signature and runs the calls; the callable it
  receives routes through the kernel's invocation filters (telemetry, logging).
- `invoke_prompt` wraps a single rendered prompt in an anonymous function named
  `InvokePromptAsync_<hex>` so prompt executions made by tools pass through the same filters.
- The kernel built at startup holds no filters; `for_turn` returns a copy with
  request-scoped filters attached.
"""

from __future__ import annotations

import inspect
import typing
import uuid
from dataclasses import dataclass, field
from typing import Annotated, Any, Callable, Optional, Protocol

import autogen

from po_agent.contracts.tool_base import PromptService
from po_agent.errors import ToolError

ANONYMOUS_PROMPT_PLUGIN = ""


def kernel_function(description: str = "", name: Optional[str] = None, **param_descriptions: str):
    """Mark a tool method as callable by the model.

    Keyword arguments describe parameters, e.g. `@kernel_function("...", sku="Specific item")`.
    """
    def deco(method: Callable[..., str]) -> Callable[..., str]:
        method.__kernel_function__ = {  # type: ignore[attr-defined]
            "name": name or method.__name__,
            "description": description,
            "params": dict(param_descriptions),
        }
        return method
    return deco


@dataclass
class KernelFunction:
    plugin_name: str
    name: str
    description: str
    method: Callable[..., str]
    param_descriptions: dict[str, str] = field(default_factory=dict)

    @property
    def full_name(self) -> str:
        return f"{self.plugin_name}.{self.name}"

    @property
    def tool_name(self) -> str:
        """Name sent to the model; `.` is not allowed in function names."""
        return f"{self.plugin_name}-{self.name}"

    def signature(self) -> inspect.Signature:
        """The method's signature without `kernel`; descriptions ride along as `Annotated` metadata."""
        hints = typing.get_type_hints(self.method)
        params = []
        for pname, p in inspect.signature(self.method).parameters.items():
            if pname == "kernel":
                continue
            tp = hints.get(pname, str)
            desc = self.param_descriptions.get(pname)
            params.append(p.replace(annotation=Annotated[tp, desc] if desc else tp))
        return inspect.Signature(params, return_annotation=str)

    def bind(self, kernel: "Kernel") -> Callable[..., str]:
        """Callable handed to AutoGen: same parameters, runs through `kernel`'s filters."""
        def call(**kwargs: Any) -> str:
            return kernel.invoke(self.full_name, kwargs)

        sig = self.signature()
        call.__name__ = self.tool_name
        call.__doc__ = self.description
        call.__signature__ = sig  # type: ignore[attr-defined]
        call.__annotations__ = {**{n: p.annotation for n, p in sig.parameters.items()}, "return": str}
        return call

    @classmethod
    def from_method(cls, plugin_name: str, method: Callable[..., str]) -> "KernelFunction":
        meta = getattr(method, "__kernel_function__")
        return cls(
            plugin_name=plugin_name,
            name=meta["name"],
            description=meta["description"],
            method=method,
            param_descriptions=meta["params"],
        )


@dataclass
class FunctionInvocationContext:
    function: KernelFunction
    arguments: dict[str, Any]
    result: Optional[str] = None


class FunctionInvocationFilter(Protocol):
    def on_function_invocation(
        self, context: FunctionInvocationContext, next_: Callable[[FunctionInvocationContext], None]
    ) -> None: ...


def _wrap(flt: FunctionInvocationFilter, nxt: Callable[[FunctionInvocationContext], None]):
    def call(ctx: FunctionInvocationContext) -> None:
        flt.on_function_invocation(ctx, nxt)
    return call


class Kernel:
    """Registry of kernel functions plus the prompt service tools use for their own prompts."""

    def __init__(
        self,
        service: PromptService,
        filters: Optional[list[FunctionInvocationFilter]] = None,
        functions: Optional[dict[str, KernelFunction]] = None,
    ):
        self.service = service
        self.filters = list(filters or [])
        self._functions: dict[str, KernelFunction] = functions if functions is not None else {}

    def add_plugin(self, plugin: Any, plugin_name: Optional[str] = None) -> list[KernelFunction]:
        pname = plugin_name or type(plugin).__name__
        added = []
        for _, member in inspect.getmembers(plugin, predicate=inspect.ismethod):
            if hasattr(member, "__kernel_function__"):
                fn = KernelFunction.from_method(pname, member)
                self._functions[fn.full_name] = fn
                added.append(fn)
        return added

    def for_turn(self, filters: list[FunctionInvocationFilter]) -> "Kernel":
        """Same functions and service, request-scoped filters."""
        return Kernel(self.service, filters=filters, functions=self._functions)

    @property
    def functions(self) -> list[KernelFunction]:
        return list(self._functions.values())

    def register_with(self, caller: autogen.ConversableAgent, executor: autogen.ConversableAgent) -> None:
        """Expose every function to `caller`'s model and let `executor` run the calls."""
        for fn in self._functions.values():
            autogen.register_function(
                fn.bind(self),
                caller=caller,
                executor=executor,
                name=fn.tool_name,
                description=fn.description,
            )

    def get_function(self, name: str) -> KernelFunction:
        fn = self._functions.get(name)
        if fn is None and "-" in name:
            fn = self._functions.get(name.replace("-", ".", 1))
        if fn is None:
            raise ToolError(f"Unknown kernel function: {name}")
        return fn

    def invoke(self, name: str, arguments: Optional[dict[str, Any]] = None) -> str:
        fn = self.get_function(name)
        ctx = FunctionInvocationContext(function=fn, arguments=dict(arguments or {}))
        self._pipeline(lambda c: setattr(c, "result", fn.method(self, **c.arguments)))(ctx)
        return ctx.result or ""

    def invoke_prompt(self, prompt: str, arguments: Optional[dict[str, Any]] = None) -> str:
        """Run a rendered prompt through the prompt service as an anonymous kernel function."""
        fn = KernelFunction(
            plugin_name=ANONYMOUS_PROMPT_PLUGIN,
            name=f"InvokePromptAsync_{uuid.uuid4().hex}",
            description="Generic function, unified prompt execution",
            method=lambda kernel: kernel.service.complete_prompt(prompt),
        )
        ctx = FunctionInvocationContext(function=fn, arguments=dict(arguments or {}))
        self._pipeline(lambda c: setattr(c, "result", fn.method(self)))(ctx)
        return ctx.result or ""

    def _pipeline(self, terminal: Callable[[FunctionInvocationContext], None]):
        call = terminal
        for flt in reversed(self.filters):
            call = _wrap(flt, call)
        return call
