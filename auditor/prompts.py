"""
Prompt templates for problem classification.

One fixed prompt: the oracle picks a single label from the closed set.
"""

from .models import ProblemClass


LABEL_DESCRIPTIONS = {
    ProblemClass.COMPARISON_SORT: "Sorting algorithms using element comparisons (bubble, merge, quick, heap, insertion, selection sort)",
    ProblemClass.COUNTING_SORT: "Non-comparison sorts using counting/bucketing (counting sort, radix sort, bucket sort)",
    ProblemClass.BINARY_SEARCH: "Searching in sorted arrays by halving (binary search, lower/upper bound)",
    ProblemClass.LINEAR_SEARCH: "Sequential search through elements (find, indexOf, includes)",
    ProblemClass.GRAPH_BFS: "Breadth-first graph traversal (level-order, shortest path unweighted)",
    ProblemClass.GRAPH_DFS: "Depth-first graph traversal (preorder, postorder, topological sort, cycle detection)",
    ProblemClass.SHORTEST_PATH_DIJKSTRA: "Weighted shortest path with priority queue",
    ProblemClass.STRING_MATCH_NAIVE: "Pattern matching with sliding window",
    ProblemClass.STRING_MATCH_KMP: "Pattern matching with failure function preprocessing",
    ProblemClass.MATRIX_MULTIPLY: "Matrix multiplication operations",
    ProblemClass.TREE_TRAVERSAL: "Tree traversal (inorder, preorder, postorder)",
    ProblemClass.HASH_LOOKUP: "Hash table operations (get, set, delete)",
    ProblemClass.MEDIAN_FINDING: "Selection/median finding (quickselect, nth_element)",
    ProblemClass.UNKNOWN: "Does not match any known problem class",
}


def _label_list() -> str:
    return "\n".join(f"- {cls.value}: {text}" for cls, text in LABEL_DESCRIPTIONS.items())


SYSTEM_PROMPT = f"""You are an expert algorithms researcher. Your ONLY task is to classify code into ONE problem class.

## Problem classes:
{_label_list()}

## Rules:
1. Pick exactly one class from the list above
2. Only classify as a specific class if you are confident
3. Use "unknown" for ambiguous cases
4. Return ONLY the JSON schema requested

Return ONLY this JSON structure (no other text):
{{
    "class": "one of the problem classes above",
    "confidence": 0.0,
    "reasoning": "brief explanation of why this classification",
    "alternativeClasses": [{{"class": "...", "confidence": 0.0}}]
}}
"""


def build_classification_prompt(code: str) -> str:
    """
    Build the classification prompt for the oracle.

    Args:
        code: Source code to classify

    Returns:
        Formatted prompt string
    """
    return f"""Classify this code into one problem class.

CODE:
```
{code}
```
"""
