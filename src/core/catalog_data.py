"""Compiled-in pattern catalog.

category -> subcategory -> day key -> numbers. Each subcategory pairs two
consecutive weekdays.
"""

PATTERN_DATA = {
    "lunMar": {
        "firstLM": {"lundi": [7, 54], "mardi": [55, 10, 70]},
        "secondLM": {"lundi": [89, 57, 61], "mardi": [16, 75, 96]},
        "thirdLM": {"lundi": [43, 39, 72], "mardi": [34, 93, 27]},
    },
    "marMer": {
        "firstMM": {"mardi": [88, 8, 46], "mercredi": [44, 92]},
        "secondMM": {"mardi": [42, 38, 68], "mercredi": [24, 83, 86]},
        "thirdMM": {"mardi": [53, 94], "mercredi": [49, 35]},
    },
    "merJeu": {
        "firstMJ": {"mercredi": [30, 9, 64], "jeudi": [33, 3, 98]},
        "secondMJ": {"mercredi": [62, 58, 91], "jeudi": [26, 1, 85]},
    },
    "jeuVen": {
        "firstJV": {"jeudi": [31, 28], "vendredi": [13, 80]},
        "secondJV": {"jeudi": [56, 78], "vendredi": [22, 0, 87]},
        "thirdJV": {"jeudi": [63, 2, 95], "vendredi": [59, 20, 36]},
    },
    "venSam": {
        "firstVS": {"vendredi": [79, 47, 51], "samedi": [15, 74, 97]},
        "secondVS": {"vendredi": [65, 67, 77], "samedi": [76, 19, 11]},
    },
    "samDim": {
        "firstSD": {"samedi": [50, 29, 21], "dimanche": [12, 5, 82]},
        "secondSD": {"samedi": [71, 69, 32], "dimanche": [23, 17, 90]},
        "thirdSD": {"samedi": [66, 60, 99], "dimanche": [4, 45]},
    },
    "dimLun": {
        "firstDL": {"dimanche": [40, 37, 41], "lundi": [14, 4, 73]},
        "secondDL": {"dimanche": [52, 48, 81], "lundi": [25, 18, 84]},
    },
}
