"""
Excel processing service for guest roster import and seating chart export
"""

import io
import logging
from typing import List, Tuple
import pandas as pd
from sqlalchemy.orm import Session

from app.models import Guest
from app.schemas.seating import SeatingArrangement

logger = logging.getLogger(__name__)

class ExcelService:
    """Service for handling Excel operations"""

    REQUIRED_COLUMNS = ['name', 'dietary preference']
    RSVP_VALUES = {'pending', 'confirmed', 'declined'}

    @staticmethod
    def create_template() -> bytes:
        """Create Excel template with the roster columns"""
        df = pd.DataFrame(
            [
                ['Sample Guest 1', 'none', 'confirmed'],
                ['Sample Guest 2', 'vegetarian', 'pending'],
                ['Sample Guest 3', 'halal', 'declined'],
            ],
            columns=['Name', 'Dietary Preference', 'RSVP']
        )

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Guest List')

        return buffer.getvalue()

    @staticmethod
    def _column_mapping(df: pd.DataFrame) -> dict:
        column_mapping = {}
        for col in df.columns:
            col_lower = str(col).lower().strip()
            if 'name' in col_lower:
                column_mapping['name'] = col
            elif 'dietary' in col_lower:
                column_mapping['dietary'] = col
            elif 'rsvp' in col_lower:
                column_mapping['rsvp'] = col
        return column_mapping

    @staticmethod
    def validate_excel_structure(df: pd.DataFrame) -> Tuple[bool, List[str]]:
        """Validate Excel file structure"""
        errors = []

        normalized_columns = [str(col).lower().strip() for col in df.columns]
        missing_columns = [
            req_col for req_col in ExcelService.REQUIRED_COLUMNS
            if req_col not in normalized_columns
        ]

        if missing_columns:
            errors.append(f"Missing required columns: {', '.join(missing_columns)}")

        if df.empty:
            errors.append("The file contains no guest rows")

        return len(errors) == 0, errors

    @staticmethod
    def validate_data_constraints(df: pd.DataFrame) -> Tuple[bool, List[str]]:
        """Validate duplicate names and RSVP values"""
        errors = []
        column_mapping = ExcelService._column_mapping(df)

        if 'name' in column_mapping:
            names = df[column_mapping['name']].dropna().astype(str).str.strip()
            names = names[names != '']
            counts = names.str.lower().value_counts()
            for name, count in counts[counts > 1].items():
                errors.append(f"Guest '{name}' appears {count} times")

        if 'rsvp' in column_mapping:
            values = df[column_mapping['rsvp']].dropna().astype(str).str.lower().str.strip()
            invalid = sorted(set(values) - ExcelService.RSVP_VALUES - {''})
            if invalid:
                errors.append(f"Invalid RSVP values: {', '.join(invalid)}")

        return len(errors) == 0, errors

    @staticmethod
    def normalize_dietary(value) -> str:
        dietary = str(value).lower().strip()
        if dietary in ['', 'nan', 'none']:
            return 'none'
        if dietary in ['vegetarian', 'veg']:
            return 'vegetarian'
        if dietary == 'halal':
            return 'halal'
        if 'allerg' in dietary:
            return f"allergies:{dietary}"
        return dietary

    @staticmethod
    def process_excel_upload(
        file_content: bytes,
        event_id: int,
        db: Session
    ) -> Tuple[bool, List[str], int]:
        """Add the guests listed in an uploaded roster to the event"""
        try:
            df = pd.read_excel(io.BytesIO(file_content))
        except Exception as e:
            logger.warning(f"Unreadable Excel upload for event {event_id}: {e}")
            return False, [f"Error reading Excel file: {str(e)}"], 0

        valid_structure, structure_errors = ExcelService.validate_excel_structure(df)
        if not valid_structure:
            return False, structure_errors, 0

        valid_data, data_errors = ExcelService.validate_data_constraints(df)
        if not valid_data:
            return False, data_errors, 0

        column_mapping = ExcelService._column_mapping(df)

        processed_count = 0
        for _, row in df.iterrows():
            # Skip empty rows
            if pd.isna(row[column_mapping['name']]) or str(row[column_mapping['name']]).strip() == '':
                continue

            rsvp_status = 'pending'
            if 'rsvp' in column_mapping and not pd.isna(row[column_mapping['rsvp']]):
                rsvp_status = str(row[column_mapping['rsvp']]).lower().strip() or 'pending'

            db.add(Guest(
                event_id=event_id,
                name=str(row[column_mapping['name']]).strip(),
                dietary=ExcelService.normalize_dietary(row[column_mapping['dietary']]),
                rsvp_status=rsvp_status
            ))
            processed_count += 1

        db.commit()
        logger.info(f"Imported {processed_count} guests into event {event_id}")
        return True, [], processed_count

    @staticmethod
    def export_arrangement(arrangement: SeatingArrangement) -> bytes:
        """Export a seating chart, seated guests first, then the unassigned pool"""
        data = []
        for table in sorted(arrangement.tables, key=lambda t: t.number):
            for guest in sorted(table.guests, key=lambda g: g.seat_number or 0):
                data.append({
                    'Table': table.number,
                    'Table Name': table.name,
                    'Seat No.': guest.seat_number,
                    'Guest': guest.name
                })
        for guest in arrangement.unassigned_guests:
            data.append({
                'Table': None,
                'Table Name': 'Unassigned',
                'Seat No.': None,
                'Guest': guest.name
            })

        df = pd.DataFrame(data, columns=['Table', 'Table Name', 'Seat No.', 'Guest'])

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Seating Chart')

        return buffer.getvalue()
