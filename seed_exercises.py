import csv
import json
import os
import sys
import chardet
from sqlalchemy.exc import IntegrityError
from techtrainer import db, create_app
from techtrainer.models import Difficulty, Equipment, Exercise, ExerciseType, MuscleGroup

FALLBACK_ENCODINGS = ['Windows-1252', 'ISO-8859-1']
REQUIRED_COLUMNS = {'exercise_id', 'name'}

MUSCLE_MAPPING = {
    'chest': MuscleGroup.CHEST,
    'lats': MuscleGroup.BACK,
    'middle back': MuscleGroup.BACK,
    'lower back': MuscleGroup.BACK,
    'upper back': MuscleGroup.BACK,
    'traps': MuscleGroup.BACK,
    'rhomboids': MuscleGroup.BACK,
    'shoulders': MuscleGroup.SHOULDERS,
    'neck': MuscleGroup.SHOULDERS,
    'biceps': MuscleGroup.BICEPS,
    'forearms': MuscleGroup.BICEPS,
    'triceps': MuscleGroup.TRICEPS,
    'quadriceps': MuscleGroup.LEGS,
    'hamstrings': MuscleGroup.LEGS,
    'calves': MuscleGroup.LEGS,
    'abductors': MuscleGroup.LEGS,
    'adductors': MuscleGroup.LEGS,
    'glutes': MuscleGroup.GLUTES,
    'abdominals': MuscleGroup.ABS,
    'abs': MuscleGroup.ABS,
    'cardio': MuscleGroup.CARDIO,
}

EQUIPMENT_MAPPING = {
    '': Equipment.NONE,
    'none': Equipment.NONE,
    'body only': Equipment.BODYWEIGHT,
    'bodyweight': Equipment.BODYWEIGHT,
    'dumbbell': Equipment.DUMBBELLS,
    'dumbbells': Equipment.DUMBBELLS,
    'barbell': Equipment.BARBELL,
    'e-z curl bar': Equipment.BARBELL,
    'kettlebell': Equipment.KETTLEBELL,
    'kettlebells': Equipment.KETTLEBELL,
    'bands': Equipment.RESISTANCE_BANDS,
    'resistance bands': Equipment.RESISTANCE_BANDS,
    'machine': Equipment.MACHINES,
    'machines': Equipment.MACHINES,
    'cable': Equipment.MACHINES,
}

LEVEL_MAPPING = {
    'beginner': Difficulty.BEGINNER,
    'intermediate': Difficulty.INTERMEDIATE,
    'advanced': Difficulty.ADVANCED,
    'expert': Difficulty.ADVANCED,
}

CATEGORY_MAPPING = {
    'strength': ExerciseType.STRENGTH,
    'powerlifting': ExerciseType.STRENGTH,
    'olympic weightlifting': ExerciseType.STRENGTH,
    'strongman': ExerciseType.STRENGTH,
    'cardio': ExerciseType.CARDIO,
    'plyometrics': ExerciseType.CARDIO,
    'stretching': ExerciseType.FLEXIBILITY,
    'flexibility': ExerciseType.FLEXIBILITY,
    'balance': ExerciseType.BALANCE,
}


def detect_encoding(file_path):
    with open(file_path, 'rb') as f:
        raw_data = f.read()
        result = chardet.detect(raw_data)
        return result['encoding'] or 'utf-8'


def detect_delimiter(file_path, encoding):
    with open(file_path, newline='', encoding=encoding, errors='replace') as csvfile:
        first_line = csvfile.readline().strip()
        delimiters = [',', ';', '\t']
        max_fields = 0
        best_delimiter = ','
        for delimiter in delimiters:
            fields = first_line.split(delimiter)
            if len(fields) > max_fields:
                max_fields = len(fields)
                best_delimiter = delimiter
        return best_delimiter


def parse_list_field(value):
    """Parse een JSON-lijst of een komma-gescheiden veld naar een lijst strings."""
    if not value:
        return []
    try:
        items = json.loads(value)
    except json.JSONDecodeError:
        return [item.strip() for item in value.split(',') if item.strip()]
    if not isinstance(items, list):
        items = [items]
    return [str(item).strip() for item in items if str(item).strip()]


def normalize_headers(fieldnames):
    # De bron-CSV bevat soms twee 'id'-kolommen: de eerste is de sleutel
    fieldnames = ['exercise_id' if f == 'id' and i == 0 else f for i, f in enumerate(fieldnames)]
    if 'id' in fieldnames:
        id_indices = [i for i, f in enumerate(fieldnames) if f == 'id']
        if 'exercise_id' in fieldnames:
            fieldnames[id_indices[-1]] = 'name_id'
        else:
            fieldnames[id_indices[0]] = 'exercise_id'
    return fieldnames


def map_muscle_group(row):
    for muscle in parse_list_field(row.get('primaryMuscles') or row.get('muscle_group') or ''):
        group = MUSCLE_MAPPING.get(muscle.lower())
        if group:
            return group
    return MuscleGroup.FULL_BODY


def row_to_values(row):
    """
    Zet een CSV-rij om naar kolomwaarden voor Exercise.

    Notities:
        - Onbekende apparatuur wordt 'other'; onbekend niveau 'beginner'.
        - De eerste afbeelding wordt image_url.

    Returns:
        dict of None: None als exercise_id of naam ontbreekt.
    """
    exercise_id = (row.get('exercise_id') or '').strip()
    name = (row.get('name') or '').strip()
    if not exercise_id or not name:
        return None

    images = parse_list_field(row.get('images') or row.get('image_url') or '')
    equipment = (row.get('equipment') or '').strip().lower()
    level = (row.get('level') or row.get('difficulty') or '').strip().lower()
    category = (row.get('category') or row.get('type') or '').strip().lower()
    return {
        'id': exercise_id[:50],
        'name': name[:100],
        'description': (row.get('description') or '').strip() or None,
        'muscle_group': map_muscle_group(row),
        'type': CATEGORY_MAPPING.get(category, ExerciseType.STRENGTH),
        'equipment': EQUIPMENT_MAPPING.get(equipment, Equipment.OTHER),
        'difficulty': LEVEL_MAPPING.get(level, Difficulty.BEGINNER),
        'instructions': parse_list_field(row.get('instructions') or ''),
        'image_url': images[0][:255] if images else None,
        'is_public': True,
    }


def _read_rows(csv_file_path, encoding, delimiter):
    with open(csv_file_path, newline='', encoding=encoding) as csvfile:
        reader = csv.DictReader(csvfile, delimiter=delimiter)
        fieldnames = normalize_headers(reader.fieldnames or [])
        reader.fieldnames = fieldnames
        return fieldnames, list(reader)


def load_exercises(csv_file_path):
    """
    Laad of werk de oefeningencatalogus bij vanuit een CSV-bestand.

    Moet binnen een app-context draaien. Bestaande oefeningen (zelfde id)
    worden bijgewerkt, nieuwe toegevoegd. Elke rij wordt apart gecommit zodat
    een foute rij de rest niet tegenhoudt.

    Returns:
        dict: aantallen 'added', 'updated' en 'skipped'.
    """
    encoding = detect_encoding(csv_file_path)
    print(f"Detected encoding: {encoding}")
    delimiter = detect_delimiter(csv_file_path, encoding)
    print(f"Using delimiter: '{delimiter}'")

    rows = None
    for candidate in [encoding] + FALLBACK_ENCODINGS:
        try:
            fieldnames, rows = _read_rows(csv_file_path, candidate, delimiter)
            break
        except UnicodeDecodeError as e:
            print(f"Failed to decode CSV file with {candidate}: {str(e)}")
    if rows is None:
        raise ValueError(f"Could not decode {csv_file_path} with any known encoding")

    missing = REQUIRED_COLUMNS - set(fieldnames)
    if missing:
        raise ValueError(f"CSV missing columns: {sorted(missing)}")

    counts = {'added': 0, 'updated': 0, 'skipped': 0}
    for row_number, row in enumerate(rows, start=1):
        values = row_to_values(row)
        if values is None:
            print(f"Skipping row {row_number}: Missing exercise_id or name")
            counts['skipped'] += 1
            continue

        exercise = db.session.get(Exercise, values['id'])
        is_new = exercise is None
        if is_new:
            exercise = Exercise(**values)
            db.session.add(exercise)
        else:
            for key, value in values.items():
                setattr(exercise, key, value)
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            print(f"Error adding exercise at row {row_number} ({values['name']}): {str(e.orig)}")
            counts['skipped'] += 1
            continue
        counts['added' if is_new else 'updated'] += 1

    print(f"Catalog loaded: {counts['added']} added, {counts['updated']} updated, {counts['skipped']} skipped")
    return counts


def seed_exercises(csv_file_path):
    app = create_app()
    with app.app_context():
        db.create_all()
        return load_exercises(csv_file_path)


if __name__ == '__main__':
    csv_file_path = sys.argv[1] if len(sys.argv) > 1 else os.getenv('EXERCISES_CSV', 'exercises.csv')
    seed_exercises(csv_file_path)
