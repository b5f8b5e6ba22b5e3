"""Template sources: inline text, single files and directory scans."""

from .walker import SourceWalker, TemplateUnit

__all__ = ['SourceWalker', 'TemplateUnit']
