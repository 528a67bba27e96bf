"""
Friend recommendations over a ``PeopleGraph`` — the shipped domain.

Modules
-------
units           : friends_in_common, random_people scoring units.
post_processors : RewardSameGender, RewardSameLocation, PenalizeAgeDifference.
blacklists      : ExistingFriends blacklist, ExcludeSelf filter.
engine          : build_friends_engine() — assembly from AppConfig.
"""
