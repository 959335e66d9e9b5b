"""
Function Registry System for vizworkshop

This module provides a decorator-based function registration system that lets
workshop participants discover functions by alias, category or free text.
"""

from typing import Dict, List, Optional, Callable, Any, Union
from functools import wraps
from difflib import get_close_matches
import inspect
import logging

logger = logging.getLogger(__name__)


class FunctionRegistry:
    """
    Central registry for all decorated functions in vizworkshop.

    This class maintains a searchable index of functions with their metadata,
    including aliases, categories, descriptions, and usage examples.
    """

    def __init__(self):
        self._registry: Dict[str, Dict[str, Any]] = {}
        self._categories: Dict[str, List[str]] = {}

    def register(self,
                 func: Callable,
                 aliases: List[str],
                 category: str,
                 description: str,
                 examples: Optional[List[str]] = None,
                 related: Optional[List[str]] = None) -> Callable:
        """
        Register a function with its metadata.

        Parameters
        ----------
        func : Callable
            The function to register
        aliases : List[str]
            List of aliases (abbreviations, ggplot2 names, etc.)
        category : str
            Function category (e.g., "preprocessing", "plotting", "survey")
        description : str
            Detailed description of the function
        examples : List[str], optional
            Usage examples
        related : List[str], optional
            Related function names

        Returns
        -------
        Callable
            The original function unchanged
        """
        if not aliases or not all(alias.strip() for alias in aliases):
            raise ValueError("Function registration requires at least one non-empty alias.")

        if not category or not category.strip():
            raise ValueError("Function registration requires a category.")

        if not description or not description.strip():
            raise ValueError("Function registration requires a description.")

        if examples is not None:
            if isinstance(examples, (tuple, set)):
                examples = list(examples)
            elif not isinstance(examples, list):
                raise TypeError("Examples must be provided as a list of strings when specified.")

        if related is not None:
            if isinstance(related, (tuple, set)):
                related = list(related)
            elif not isinstance(related, list):
                raise TypeError("Related entries must be provided as a list of strings when specified.")

        module_name = func.__module__
        func_name = func.__name__
        full_name = f"{module_name}.{func_name}"

        try:
            signature = str(inspect.signature(func))
        except (TypeError, ValueError):
            signature = "(*args, **kwargs)"
        docstring = inspect.getdoc(func) or "No documentation available"

        entry = {
            'function': func,
            'full_name': full_name,
            'short_name': func_name,
            'module': module_name,
            'aliases': aliases,
            'category': category,
            'description': description,
            'examples': examples or [],
            'related': related or [],
            'signature': signature,
            'docstring': docstring,
        }

        for alias in aliases:
            self._registry[alias.lower()] = entry
        self._registry[func_name.lower()] = entry
        self._registry[full_name.lower()] = entry

        self._categories.setdefault(category, [])
        if full_name not in self._categories[category]:
            self._categories[category].append(full_name)

        logger.debug("Registered %s under %s", full_name, category)
        return func

    def find(self, query: str, threshold: float = 0.6) -> List[Dict[str, Any]]:
        """
        Find functions matching the query.

        Exact alias/name hits come first, then fuzzy matches on aliases, then
        entries whose description mentions the query.
        """
        query_lower = query.lower()
        results = []

        if query_lower in self._registry:
            results.append(self._registry[query_lower])

        close_matches = get_close_matches(query_lower, list(self._registry.keys()), n=5, cutoff=threshold)
        for match in close_matches:
            results.append(self._registry[match])

        for entry in self._registry.values():
            if query_lower in entry['description'].lower():
                results.append(entry)

        seen = set()
        unique_results = []
        for entry in results:
            if entry['full_name'] not in seen:
                seen.add(entry['full_name'])
                unique_results.append(entry)
        return unique_results

    def get_by_category(self, category: str) -> List[Dict[str, Any]]:
        """Get all functions in a specific category."""
        if category not in self._categories:
            return []
        return [self._registry[name.lower()] for name in self._categories[category]]

    def list_categories(self) -> List[str]:
        """List all available categories."""
        return list(self._categories.keys())

    def get_function(self, query: str) -> Optional[Callable]:
        matches = self.find(query)
        if matches:
            return matches[0]['function']
        return None

    def format_results(self, results: List[Dict[str, Any]], verbose: bool = False) -> str:
        if not results:
            return "❌ No matching functions found."

        output = [f"🔍 Found {len(results)} matching function(s):\n"]
        for i, entry in enumerate(results, 1):
            output.append(f"\n{i}. 📦 {entry['full_name']}")
            output.append(f"   📝 {entry['description']}")
            output.append(f"   🏷️  Aliases: {', '.join(entry['aliases'])}")
            output.append(f"   📁 Category: {entry['category']}")
            if verbose:
                output.append(f"   🔧 Signature: {entry['signature']}")
                if entry['examples']:
                    output.append("   💡 Examples:")
                    for example in entry['examples']:
                        output.append(f"      {example}")
                if entry['related']:
                    output.append(f"   🔗 Related: {', '.join(entry['related'])}")
        return "\n".join(output)


# Global registry instance
_global_registry = FunctionRegistry()


def register_function(aliases: List[str],
                      category: str,
                      description: str,
                      examples: Optional[List[str]] = None,
                      related: Optional[List[str]] = None):
    """
    Decorator to register a function with metadata.

    Examples
    --------
    >>> @register_function(
    ...     aliases=["facet_wrap", "small multiples"],
    ...     category="plotting",
    ...     description="Split one chart into panels by a categorical column"
    ... )
    ... def facet_wrap(data, kind, x, y=None, facet=None):
    ...     pass
    """
    def decorator(func: Callable) -> Callable:
        _global_registry.register(
            func=func,
            aliases=aliases,
            category=category,
            description=description,
            examples=examples,
            related=related
        )

        @wraps(func)
        def wrapper(*args, **kwargs):
            return func(*args, **kwargs)

        wrapper._registry_info = {
            'aliases': aliases,
            'category': category,
            'description': description
        }
        return wrapper

    return decorator


def find_function(query: str, verbose: bool = False) -> Union[Callable, None]:
    """
    Find functions matching the query, print them and return the best hit.

    Examples
    --------
    >>> import vizworkshop as vw
    >>> vw.find_function("ggsave")
    >>> vw.find_function("facet")
    """
    results = _global_registry.find(query)
    print(_global_registry.format_results(results, verbose=verbose))
    if results:
        return results[0]['function']
    return None


def list_functions(category: Optional[str] = None) -> List[str]:
    """
    Print all registered functions, or those in one category.

    Returns the short names that were listed.
    """
    if category:
        results = _global_registry.get_by_category(category)
        print(f"📚 Functions in category '{category}':")
    else:
        all_functions = {}
        for entry in _global_registry._registry.values():
            all_functions[entry['full_name']] = entry
        results = list(all_functions.values())
        print(f"📚 All registered functions ({len(results)} total):")

    if not results:
        print("   No functions found.")
        return []

    categories = {}
    for entry in results:
        categories.setdefault(entry['category'], []).append(entry)
    for cat, entries in sorted(categories.items()):
        if not category:
            print(f"\n🏷️  {cat.upper()}:")
        for entry in sorted(entries, key=lambda x: x['short_name']):
            print(f"   • {entry['short_name']}: {entry['description']}")
    return sorted(entry['short_name'] for entry in results)


def get_function_help(query: str) -> Optional[str]:
    """
    Print detailed help for a function and return it as text.
    """
    results = _global_registry.find(query)
    if not results:
        print(f"❌ No function found for '{query}'")
        return None

    entry = results[0]
    lines = [
        f"📦 {entry['full_name']}",
        '=' * 50,
        f"📝 Description: {entry['description']}",
        f"🏷️  Aliases: {', '.join(entry['aliases'])}",
        f"📁 Category: {entry['category']}",
        f"🔧 Signature: {entry['signature']}",
        "",
        "📖 Documentation:",
        entry['docstring'],
    ]
    if entry['examples']:
        lines.append("\n💡 Examples:")
        lines.extend(f"   {example}" for example in entry['examples'])
    if entry['related']:
        lines.append(f"\n🔗 Related functions: {', '.join(entry['related'])}")
    text = "\n".join(lines)
    print(text)
    return text
