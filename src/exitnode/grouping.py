from typing import Dict, List, Sequence

from .models import Candidate, RegionGroup


def group_by_country(candidates: Sequence[Candidate]) -> List[RegionGroup]:
    """
    Partition candidates into region groups keyed by country code.

    Groups appear in order of first occurrence and keep the relative order of
    their candidates, so a canonically ordered input yields canonically
    ordered groups. The candidate objects themselves are shared, not copied.
    """
    groups: Dict[str, RegionGroup] = {}
    for candidate in candidates:
        group = groups.get(candidate.country_code)
        if group is None:
            group = RegionGroup(country_code=candidate.country_code, country=candidate.country)
            groups[candidate.country_code] = group
        group.candidates.append(candidate)
    return list(groups.values())
