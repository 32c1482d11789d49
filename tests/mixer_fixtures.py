"""
Importable contributor classes.

Cache artifacts import their contributors by ``module:qualname``, so the
classes used by round-trip tests live here instead of inside test functions.
"""

import abc
from typing import ClassVar, Protocol

from class_mixer.advice import ShortCircuit


class Greeter:
  greeting = "hi"

  def greet(self):
    return self.greeting


class Echo:
  def greet(self):
    return "yo"

  def echo(self, text, *, times=1):
    return " ".join([text] * times)


class Guard:
  def BEFORE_greet(self):
    if getattr(self, "blocked", False):
      return ShortCircuit("blocked")
    return None


class Sized(abc.ABC):
  @abc.abstractmethod
  def size(self):
    raise NotImplementedError


class Box(Sized):
  limit: ClassVar[int] = 10
  items = ()

  def size(self):
    return len(self.items)


class Named(Protocol):
  def name(self) -> str: ...


class Person(Named):
  def name(self) -> str:
    return "ada"


class Tagged:
  tag = "fixture"

  @staticmethod
  def kind():
    return "tagged"

  @classmethod
  def label(cls, suffix="!"):
    return cls.__name__ + suffix


class Outer:
  class Inner:
    def nested(self):
      return "inner"


def concat(*results):
  return "".join(results)
