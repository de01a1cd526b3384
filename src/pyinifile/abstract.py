# -*- encoding: utf-8 -*-
# @File   : abstract.py
# @Time   : 2024/11/02 20:22:30
# @Author : Kariko Lin

from abc import ABCMeta, abstractmethod
from os import PathLike
from typing import Generic, TypeVar

T = TypeVar('T')


class FileHandler(Generic[T], metaclass=ABCMeta):
    """Binds a document type to the file it was (or will be) loaded from."""

    def __init__(self, filename: str | PathLike[str] | None) -> None:
        self._fn = None if filename is None else str(filename)

    @property
    def filename(self) -> str | None:
        return self._fn

    @abstractmethod
    def read(self) -> T:
        raise NotImplementedError

    @abstractmethod
    def write(self, instance: T) -> None:
        raise NotImplementedError

    def __str__(self) -> str:
        return self._fn or '<memory>'
