"""FAQ assembly: building, merging and searching FAQ groups."""

from faqtory.assembly.assembler import FAQAssembler, make_title
from faqtory.assembly.builder import FAQBuilder
from faqtory.assembly.search import FAQSearcher

__all__ = ["FAQAssembler", "FAQBuilder", "FAQSearcher", "make_title"]
