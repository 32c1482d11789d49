"""
Python Source Code Backend.

This module implements a Compiler Backend that synthesizes the Python source of
a composite class from its ``CompositeDescriptor`` via LibCST.

Two flavours are produced from the same tree:

- artifact source (``with_imports=True``): machine-generated header, one import
  per referenced symbol, then the class. Written to cache files.
- in-process source (``with_imports=False``): the class alone. Executed in a
  namespace already holding every alias.
"""

from typing import List, Optional, Union

import libcst as cst

from class_mixer.compiler.backend import CompilerBackend
from class_mixer.compiler.ir import (
  DECISION_SLOT,
  PARAMETER_DEFAULT_REF,
  REPLACE_REF,
  RETURN_SLOT,
  SHORT_CIRCUIT_REF,
  AdviceCall,
  CallStep,
  CombineStep,
  CompositeDescriptor,
  FieldDef,
  MethodDef,
  is_literal_source,
)
from class_mixer.core.schema import MemberSignature, ParamSpec
from class_mixer.enums import AdviceScope, MemberKind, ParamKind, Visibility
from class_mixer.errors import CacheWriteFailure

HEADER_COMMENT = "# This file was auto-generated by class-mixer. DO NOT EDIT MANUALLY."

_RECEIVERS = {
  MemberKind.INSTANCE: "self",
  MemberKind.CLASS: "cls",
  MemberKind.STATIC: None,
}


class PythonBackend(CompilerBackend):
  """
  Synthesizes a Python CST Module from a CompositeDescriptor.
  """

  def __init__(self, with_imports: bool = True) -> None:
    self.with_imports = with_imports

  def compile(self, descriptor: CompositeDescriptor) -> str:
    return self.generate(descriptor).code

  def generate(self, descriptor: CompositeDescriptor) -> cst.Module:
    """
    Builds the module tree.

    Args:
        descriptor (CompositeDescriptor): The composite to render.

    Returns:
        cst.Module: The module holding the composite class.

    Raises:
        CacheWriteFailure: If imports are requested for a symbol defined in a local scope.
    """
    body: List[cst.BaseStatement] = []
    header: List[cst.EmptyLine] = []
    class_def = self._build_class(descriptor)

    if self.with_imports:
      header.append(cst.EmptyLine(comment=cst.Comment(HEADER_COMMENT)))
      body.extend(self._generate_imports(descriptor))
      if body:
        class_def = class_def.with_changes(
          leading_lines=[cst.EmptyLine(newline=cst.Newline()), cst.EmptyLine(newline=cst.Newline())]
        )

    body.append(class_def)
    return cst.Module(body=body, header=header)

  def _generate_imports(self, descriptor: CompositeDescriptor) -> List[cst.SimpleStatementLine]:
    stmts = []
    for path, ref in descriptor.symbols.items():
      if not ref.importable:
        raise CacheWriteFailure(f"'{path}' is not importable from a cache artifact (defined in a local scope).")
      alias = descriptor.alias(path)
      head, _, rest = ref.qualname.partition(".")
      stmts.append(cst.parse_statement(f"from {ref.module} import {head} as {alias}"))
      if rest:
        # Nested classes are reached through their top-level owner.
        stmts.append(cst.parse_statement(f"{alias} = {alias}.{rest}"))
    return stmts

  def _build_class(self, descriptor: CompositeDescriptor) -> cst.ClassDef:
    header = descriptor.header
    bases = [cst.Arg(value=cst.Name(descriptor.alias(header.base)))]
    bases.extend(cst.Arg(value=cst.Name(descriptor.alias(c))) for c in header.extra_bases)

    stmts: List[cst.BaseStatement] = [self._build_field(descriptor, f) for f in descriptor.fields]
    for method in descriptor.methods:
      func = self._build_method(descriptor, method)
      stmts.append(func.with_changes(leading_lines=[cst.EmptyLine(newline=cst.Newline())]))

    if not stmts:
      stmts.append(cst.parse_statement("pass"))

    return cst.ClassDef(
      name=cst.Name(header.name),
      bases=bases,
      body=cst.IndentedBlock(body=stmts),
    )

  def _build_field(self, descriptor: CompositeDescriptor, field: FieldDef) -> cst.SimpleStatementLine:
    if field.is_descriptor:
      text = f"{field.name} = {descriptor.alias(field.origin)}.{field.name}"
    elif field.default is None:
      text = f"{field.name}: {field.annotation!r}"
    else:
      if is_literal_source(field.default):
        value = field.default
      else:
        value = f"{descriptor.alias(field.origin)}.{field.name}"
      if field.annotation is not None:
        text = f"{field.name}: {field.annotation!r} = {value}"
      else:
        text = f"{field.name} = {value}"

    stmt = cst.parse_statement(text)
    if field.visibility != Visibility.PUBLIC:
      stmt = stmt.with_changes(
        trailing_whitespace=cst.TrailingWhitespace(
          whitespace=cst.SimpleWhitespace("  "),
          comment=cst.Comment(f"# was {field.visibility.value}"),
        )
      )
    return stmt

  def _build_method(self, descriptor: CompositeDescriptor, method: MethodDef) -> cst.FunctionDef:
    sig = method.signature
    receiver = _RECEIVERS[sig.kind]

    decorators = []
    if sig.kind == MemberKind.STATIC:
      decorators.append(cst.Decorator(decorator=cst.Name("staticmethod")))
    elif sig.kind == MemberKind.CLASS:
      decorators.append(cst.Decorator(decorator=cst.Name("classmethod")))

    return cst.FunctionDef(
      name=cst.Name(method.name),
      params=self._build_parameters(descriptor, method, receiver),
      body=cst.IndentedBlock(body=self._build_body(descriptor, method, receiver)),
      decorators=decorators,
      asynchronous=cst.Asynchronous() if sig.is_async else None,
    )

  def _build_parameters(self, descriptor: CompositeDescriptor, method: MethodDef, receiver: Optional[str]) -> cst.Parameters:
    sig = method.signature
    function = f"{descriptor.alias(method.reference)}.{method.name}"
    if sig.kind == MemberKind.CLASS:
      function += ".__func__"

    posonly: List[cst.Param] = []
    params: List[cst.Param] = []
    kwonly: List[cst.Param] = []
    star_arg: Union[cst.Param, cst.ParamStar, cst.MaybeSentinel] = cst.MaybeSentinel.DEFAULT
    star_kwarg: Optional[cst.Param] = None

    for param in sig.params:
      if param.kind in (ParamKind.POSITIONAL_ONLY, ParamKind.POSITIONAL_OR_KEYWORD):
        default = self._default(descriptor, param, function) if param.has_default else None
        target = posonly if param.kind == ParamKind.POSITIONAL_ONLY else params
        target.append(self._param(param, default))
      elif param.kind == ParamKind.VAR_POSITIONAL:
        star_arg = self._param(param, None)
      elif param.kind == ParamKind.KEYWORD_ONLY:
        default = self._default(descriptor, param, function) if param.has_default else None
        kwonly.append(self._param(param, default))
      else:
        star_kwarg = self._param(param, None)

    if kwonly and star_arg is cst.MaybeSentinel.DEFAULT:
      star_arg = cst.ParamStar()

    if receiver is not None:
      (posonly if posonly else params).insert(0, cst.Param(name=cst.Name(receiver)))

    return cst.Parameters(
      params=params,
      posonly_params=posonly,
      posonly_ind=cst.ParamSlash() if posonly else cst.MaybeSentinel.DEFAULT,
      star_arg=star_arg,
      kwonly_params=kwonly,
      star_kwarg=star_kwarg,
    )

  def _param(self, param: ParamSpec, default: Optional[cst.BaseExpression]) -> cst.Param:
    annotation = None
    if param.annotation is not None:
      annotation = cst.Annotation(annotation=cst.SimpleString(repr(param.annotation)))
    return cst.Param(name=cst.Name(param.name), annotation=annotation, default=default)

  def _default(self, descriptor: CompositeDescriptor, param: ParamSpec, function: str) -> cst.BaseExpression:
    # Non-literal defaults are read back from the reference implementation.
    if is_literal_source(param.default):
      return cst.parse_expression(param.default)
    lookup = descriptor.alias(PARAMETER_DEFAULT_REF.path)
    return cst.parse_expression(f"{lookup}({function}, {param.name!r})")

  def _build_body(self, descriptor: CompositeDescriptor, method: MethodDef, receiver: Optional[str]) -> List[cst.BaseStatement]:
    sig = method.signature
    forwarded = self._forward_args(sig)
    core = self._core_expression(descriptor, method, receiver, forwarded)

    if not method.is_advised:
      return [cst.parse_statement(f"return {core}")]

    hook_owner = receiver or descriptor.name
    member_id = repr(method.member_id)
    stmts: List[cst.BaseStatement] = []

    for call in method.before:
      if call.scope == AdviceScope.GLOBAL:
        stmts.append(cst.parse_statement(self._hook_call(hook_owner, call, [member_id, *forwarded], sig)))
      else:
        short_circuit = descriptor.alias(SHORT_CIRCUIT_REF.path)
        stmts.append(cst.parse_statement(f"{DECISION_SLOT} = {self._hook_call(hook_owner, call, forwarded, sig)}"))
        stmts.append(
          cst.parse_statement(f"if isinstance({DECISION_SLOT}, {short_circuit}):\n    return {DECISION_SLOT}.value\n")
        )

    stmts.append(cst.parse_statement(f"{RETURN_SLOT} = {core}"))

    for call in method.after:
      if call.scope == AdviceScope.GLOBAL:
        stmts.append(cst.parse_statement(self._hook_call(hook_owner, call, [member_id, RETURN_SLOT, *forwarded], sig)))
      else:
        replace = descriptor.alias(REPLACE_REF.path)
        args = [RETURN_SLOT, *forwarded]
        stmts.append(cst.parse_statement(f"{DECISION_SLOT} = {self._hook_call(hook_owner, call, args, sig)}"))
        stmts.append(
          cst.parse_statement(f"if isinstance({DECISION_SLOT}, {replace}):\n    {RETURN_SLOT} = {DECISION_SLOT}.value\n")
        )

    stmts.append(cst.parse_statement(f"return {RETURN_SLOT}"))
    return stmts

  def _hook_call(self, owner: str, call: AdviceCall, args: List[str], sig: MemberSignature) -> str:
    expr = f"{owner}.{call.hook}({', '.join(args)})"
    if call.is_async and sig.is_async:
      return f"await {expr}"
    return expr

  def _forward_args(self, sig: MemberSignature) -> List[str]:
    args = []
    for param in sig.params:
      if param.kind == ParamKind.VAR_POSITIONAL:
        args.append(f"*{param.name}")
      elif param.kind == ParamKind.KEYWORD_ONLY:
        args.append(f"{param.name}={param.name}")
      elif param.kind == ParamKind.VAR_KEYWORD:
        args.append(f"**{param.name}")
      else:
        args.append(param.name)
    return args

  def _core_expression(
    self,
    descriptor: CompositeDescriptor,
    method: MethodDef,
    receiver: Optional[str],
    forwarded: List[str],
  ) -> str:
    sig = method.signature
    if isinstance(method.core, CombineStep):
      calls = [self._call(descriptor, step, sig, receiver, forwarded) for step in method.core.calls]
      return f"{descriptor.alias(method.core.combinator)}({', '.join(calls)})"
    return self._call(descriptor, method.core, sig, receiver, forwarded)

  def _call(
    self,
    descriptor: CompositeDescriptor,
    step: CallStep,
    sig: MemberSignature,
    receiver: Optional[str],
    forwarded: List[str],
  ) -> str:
    target = f"{descriptor.alias(step.contributor)}.{step.member}"
    if sig.kind == MemberKind.CLASS:
      target += ".__func__"
    args = [receiver, *forwarded] if receiver is not None else forwarded
    expr = f"{target}({', '.join(args)})"
    if sig.is_async:
      return f"await {expr}"
    return expr
