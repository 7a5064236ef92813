"""
Default phrase bank: four categories by three levels, five phrases each.

BACKSTOP_PHRASES is the last resort when the phrase table yields nothing.
Every level must keep at least one backstop phrase.
"""

from __future__ import annotations

from roastlog.humor.models import HumorLevel, PhraseCategory, PhraseEntry

ERROR_TRIGGERS = ["error", "exception", "fail", "none", "null"]
SUCCESS_TRIGGERS = ["success", "complete", "done", "finished", "ok"]
DATA_TRIGGERS = ["object", "array", "string", "number", "boolean"]
GENERAL_TRIGGERS = ["log", "debug", "info", "print"]

_BANK: dict[PhraseCategory, tuple[list[str], dict[HumorLevel, list[str]]]] = {
    PhraseCategory.ERROR: (
        ERROR_TRIGGERS,
        {
            HumorLevel.MILD: [
                "Oops! Looks like something went sideways 🤔",
                "Well, that didn't go as planned...",
                "Houston, we have a problem (but it's probably fixable)",
                "Error detected! Time for some detective work 🕵️",
                "Something's not quite right here...",
            ],
            HumorLevel.MEDIUM: [
                "Congratulations! You've discovered a new way to break things 🎉",
                "Error: Task failed successfully... wait, that's not right",
                "Your code is having an existential crisis right now",
                "Plot twist: The bug was inside us all along",
                "Error 404: Logic not found",
            ],
            HumorLevel.SAVAGE: [
                "Your code just rage-quit harder than a gamer losing at Dark Souls",
                "This error is so bad, even Stack Overflow is judging you",
                "Congratulations! You've achieved peak chaos engineering",
                "Your code is throwing more tantrums than a toddler at bedtime",
                "This traceback is basically your code's resignation letter",
            ],
        },
    ),
    PhraseCategory.SUCCESS: (
        SUCCESS_TRIGGERS,
        {
            HumorLevel.MILD: [
                "Nice work! Everything's running smoothly ✨",
                "Success! Your code is behaving like a good citizen",
                "Well done! No fires to put out here",
                "Looking good! Keep up the great work",
                "Success achieved! Time for a coffee break ☕",
            ],
            HumorLevel.MEDIUM: [
                "Success! Your code is showing off like it's at a talent show",
                "Mission accomplished! Your code deserves a gold star ⭐",
                "Victory! Your logic is sharper than a ninja's blade",
                "Success! Even the rubber duck is impressed",
                "Boom! Your code just dropped the mic 🎤",
            ],
            HumorLevel.SAVAGE: [
                "Success! Your code is flexing harder than a bodybuilder at the beach",
                "Flawless victory! Your code just achieved legendary status",
                "Success! Your algorithm is smoother than a jazz saxophone solo",
                "Perfect execution! Your code is basically showing off at this point",
                "Success! Your logic is so clean, Marie Kondo would be proud",
            ],
        },
    ),
    PhraseCategory.DATA: (
        DATA_TRIGGERS,
        {
            HumorLevel.MILD: [
                "Interesting data you've got there! 📊",
                "Data logged successfully - looking good!",
                "Your variables are all accounted for",
                "Data structure detected and noted",
                "Information received and processed ✓",
            ],
            HumorLevel.MEDIUM: [
                "Your data is more organized than my sock drawer",
                "Data logged! Your variables are living their best life",
                "Nice data structure! It's like digital feng shui",
                "Your objects are more well-behaved than most people",
                "Data received! Your lists are lining up like good soldiers",
            ],
            HumorLevel.SAVAGE: [
                "Your data structure is so clean, it makes minimalists weep with joy",
                "This data is more organized than a German train schedule",
                "Your objects have better structure than most architectural marvels",
                "Data logged! Your variables are more reliable than most politicians",
                "Your lists are so well-ordered, they could teach a masterclass in discipline",
            ],
        },
    ),
    PhraseCategory.GENERAL: (
        GENERAL_TRIGGERS,
        {
            HumorLevel.MILD: [
                "Another day, another log entry 📝",
                "Logging in progress... carry on!",
                "Debug mode activated - happy coding!",
                "print(): the developer's best friend",
                "Keeping track of things, one line at a time",
            ],
            HumorLevel.MEDIUM: [
                "print(): because printf debugging never goes out of style",
                "Another log entry for the digital archaeology team",
                "Debugging: the art of removing bugs you put in yesterday",
                "print(): turning developers into digital detectives since forever",
                "Your terminal is chattier than a coffee shop on Monday morning",
            ],
            HumorLevel.SAVAGE: [
                "print(): because real debuggers are for people who plan ahead",
                "Another log entry in the epic saga of 'Why Doesn't This Work?'",
                "Debugging: the fine art of staring at code until it confesses",
                "Your terminal has more drama than a reality TV show",
                "print(): the developer's equivalent of talking to themselves",
            ],
        },
    ),
}

BACKSTOP_PHRASES: dict[HumorLevel, tuple[str, ...]] = {
    HumorLevel.MILD: (
        "Well, that's interesting! 🤔",
        "Noted and logged! 📝",
        "Another day, another log entry!",
        "print(): the developer's faithful companion",
        "Logging in progress... carry on! ✨",
    ),
    HumorLevel.MEDIUM: (
        "print(): because printf debugging never goes out of style!",
        "Another entry in the digital diary of development",
        "Your terminal is chattier than a coffee shop on Monday morning ☕",
        "Debugging: the art of talking to yourself through code",
        "print(): turning developers into digital detectives since forever 🕵️",
    ),
    HumorLevel.SAVAGE: (
        "print(): because real debuggers are for people who plan ahead",
        "Another log entry in the epic saga of 'Why Doesn't This Work?'",
        "Your terminal has more drama than a reality TV show 📺",
        "print(): the developer's equivalent of talking to themselves",
        "Debugging: the fine art of staring at code until it confesses 👁️",
    ),
}


def default_entries() -> list[PhraseEntry]:
    """Fresh copies of the default bank, in category then level order."""
    return [
        PhraseEntry(
            triggers=list(triggers),
            phrases=list(phrases),
            level=level,
            category=category,
        )
        for category, (triggers, by_level) in _BANK.items()
        for level, phrases in by_level.items()
    ]
