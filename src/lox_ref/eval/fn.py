from __future__ import annotations

from typing import Iterable

from ..tree import Block, Class, Function, Lambda
from ..types import Environment, LoxClass, LoxFn, LoxNil
from .capture import capture_environment

def make_function(name: str, params: Iterable[str], body: Block, env: Environment, is_initializer: bool=False) -> LoxFn:
    params = tuple(params)
    captured = capture_environment(body, params, env)

    return LoxFn(name=name, params=params, body=body, captured=captured, is_initializer=is_initializer)

def exec_function_decl(node: Function, env: Environment) -> None:
    # bind the name first so a recursive body captures the cell that receives the function
    cell = env.define(node.name, LoxNil())
    cell.value = make_function(node.name, node.params, node.body, env)

def eval_lambda(node: Lambda, env: Environment) -> LoxFn:
    return make_function("lambda", node.params, node.body, env)

def exec_class_decl(node: Class, env: Environment) -> None:
    cell = env.define(node.name, LoxNil())
    methods = {
        m.name: make_function(m.name, m.params, m.body, env, is_initializer=(m.name == "init"))
        for m in node.methods
    }
    cell.value = LoxClass(name=node.name, methods=methods, closure=env)
