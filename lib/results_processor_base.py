#!/usr/bin/env python3
import sys
def eprint(*args, **kwargs): print(*args, file=sys.stderr, **kwargs)

#### Import some standard modules
import os
import re
import json
import timeit
from types import MappingProxyType

#### Import technical modules
import numpy
from pyteomics import fasta

from peptide_mass_calculator import PeptideMassCalculator
from cleavage_state_calculator import CleavageStateCalculator
from modification_catalog import ModificationCatalog, CUSTOM_AA
from warning_limiter import WarningLimiter, BoundedMessageList

#### Protein number used when a protein is not in the FASTA file
MAX_PROTEIN_NUMBER = sys.maxsize


####################################################################################################
#### Raised while parsing a row with missing mandatory values; caught per row
class ResultsParseError(Exception):
    pass


####################################################################################################
#### ResultsProcessorBase class
class ResultsProcessorBase:

    ####################################################################################################
    #### Constructor
    def __init__(self, options=None, verbose=0):

        # Set verbosity
        if verbose is None:
            verbose = 0
        self.verbose = verbose

        self.options = self.get_default_options()
        if options is not None:
            for key, value in options.items():
                if value is not None:
                    self.options[key] = value

        self.status = self.create_status()
        self.abort_processing = False

        self.mass_calculator = PeptideMassCalculator()
        self.cleavage_calculator = CleavageStateCalculator()
        self.catalog = ModificationCatalog(verbose=verbose)

        self.protein_order = {}
        self.error_messages = BoundedMessageList(max_messages=255)
        self.mass_mismatch_limiter = WarningLimiter()

        self.scan_group_details = []
        self.scan_group_combos = {}
        self.next_scan_group_id = 1

        self.n_lines_read = 0
        self.progress_intro = False


    ####################################################################################################
    #### Default processing options
    @staticmethod
    def get_default_options():
        options = {
            'create_first_hits_file': True,
            'create_synopsis_file': True,
            'msgfplus_synopsis_evalue_threshold': 0.75,
            'msgfplus_synopsis_spec_evalue_threshold': 5e-7,
            'msgfplus_synopsis_qvalue_threshold': 0.01,
            'toppic_synopsis_pvalue_threshold': 0.95,
            'fasta_file': None,
            'search_tool_parameter_file': None,
            'output_directory': None,
            'progress_interval': 500,
        }
        return options


    ####################################################################################################
    #### Create the status/problem record
    @staticmethod
    def create_status():
        status = {
            'state': { 'status': 'OK', 'code': 'OK', 'message': 'Not yet processed' },
            'problems': {
                'warnings': { 'count': 0, 'list': [], 'codes': {} },
                'errors': { 'count': 0, 'list': [], 'codes': {} },
            },
            'counts': {},
        }
        return status


    ####################################################################################################
    #### Record a warning or error
    def log_event(self, status, code, message):

        category = 'UNKNOWN'
        if status == 'WARNING':
            category = 'warnings'
        elif status == 'ERROR':
            category = 'errors'
        else:
            raise ValueError(f"Unrecognized event status '{status}'")

        #### Record the event
        full_message = f"{status}: [{code}]: {message}"
        self.status['problems'][category]['count'] += 1
        self.status['problems'][category]['list'].append(full_message)
        if code not in self.status['problems'][category]['codes']:
            self.status['problems'][category]['codes'][code] = 1
        else:
            self.status['problems'][category]['codes'][code] += 1

        #### If this is an error, also update the overall state
        if status == 'ERROR':
            self.status['state']['status'] = status
            self.status['state']['code'] = code
            self.status['state']['message'] = message
        if self.verbose >= 1 or status == 'ERROR':
            eprint(full_message)


    ####################################################################################################
    #### Record a rate-limited warning, if the limiter lets it through
    def log_limited_warning(self, limiter, code, message):
        message = limiter.record(message)
        if message is not None:
            self.log_event('WARNING', code, message)


    ####################################################################################################
    #### Print a dot every so many lines
    def report_progress(self):
        self.n_lines_read += 1
        if self.verbose >= 1 and self.n_lines_read % self.options['progress_interval'] == 0:
            if not self.progress_intro:
                eprint("INFO: Reading results.. ", end='')
                self.progress_intro = True
            eprint(".", end='', flush=True)


    ####################################################################################################
    #### Build an immutable logical-name to column-index mapping from the header line
    def build_column_mapping(self, header_fields, column_synonyms):

        lookup = {}
        for logical_name, synonyms in column_synonyms.items():
            for synonym in synonyms:
                lookup[synonym.lower()] = logical_name

        column_mapping = {}
        for index, header_name in enumerate(header_fields):
            key = header_name.strip().lower()
            if key in lookup:
                column_mapping[lookup[key]] = index
            else:
                self.log_event('WARNING', 'UnrecognizedColumn', f"Unrecognized column header name '{header_name.strip()}'")

        return MappingProxyType(column_mapping)


    ####################################################################################################
    @staticmethod
    def get_column_value(fields, column_mapping, column_name, default=''):
        index = column_mapping.get(column_name)
        if index is None or index >= len(fields):
            return default
        return fields[index].strip()


    ####################################################################################################
    #### Read a FASTA file to learn the order of the proteins
    def cache_protein_names_from_fasta(self, fasta_file=None):

        if fasta_file is None:
            fasta_file = self.options['fasta_file']
        self.protein_order = {}
        if fasta_file is None or fasta_file == '':
            return False
        if not os.path.isfile(fasta_file):
            self.log_event('WARNING', 'FastaFileNotFound', f"FASTA file '{fasta_file}' not found; protein names will not be prioritized by FASTA order")
            return False

        t0 = timeit.default_timer()
        protein_number = 0
        with fasta.read(fasta_file) as reader:
            for description, sequence in reader:
                protein_name = self.truncate_protein_name(description)
                protein_number += 1
                if protein_name not in self.protein_order:
                    self.protein_order[protein_name] = protein_number

        t1 = timeit.default_timer()
        if self.verbose >= 1:
            eprint(f"INFO: Cached {len(self.protein_order)} protein names from {fasta_file} in {t1-t0:.2f} sec")
        return True


    def get_protein_number(self, protein_name):
        return self.protein_order.get(protein_name, MAX_PROTEIN_NUMBER)


    ####################################################################################################
    #### Protein names end at the first space
    @staticmethod
    def truncate_protein_name(protein_name):
        protein_name = protein_name.strip()
        if ' ' in protein_name:
            return protein_name[:protein_name.index(' ')]
        return protein_name


    ####################################################################################################
    #### Replace the context residues of a peptide, e.g. (K.PEPTIDE.R, '-', 'G') -> -.PEPTIDE.G
    @staticmethod
    def add_update_prefix_and_suffix_residues(peptide, prefix, suffix):

        if '.' not in peptide:
            return f"{prefix}.{peptide}.{suffix}"

        if len(peptide) >= 2:
            if peptide[1] == '.':
                new_peptide = f"{prefix}.{peptide[2:]}"
            elif peptide[0] == '.':
                new_peptide = prefix + peptide
            else:
                new_peptide = f"{prefix}.{peptide}"
        else:
            new_peptide = f"{prefix}.{peptide}"

        if len(new_peptide) >= 4:
            if new_peptide[-2] == '.':
                return f"{new_peptide[:-2]}.{suffix}"
            if new_peptide[-1] == '.':
                return new_peptide + suffix
        return f"{new_peptide}.{suffix}"


    ####################################################################################################
    #### Split a sorted list of results into runs with the same scan number
    @staticmethod
    def split_into_scan_runs(results):
        run = []
        for result in results:
            if len(run) > 0 and result['ScanNum'] != run[0]['ScanNum']:
                yield run
                run = []
            run.append(result)
        if len(run) > 0:
            yield run


    ####################################################################################################
    #### Rank the results of one scan by score: best is 1, equal scores share a rank,
    #### and the rank goes up by one each time the score changes
    @staticmethod
    def assign_ranks(results, score_key, rank_key):
        if len(results) == 0:
            return
        scores = numpy.array([ result[score_key] for result in results ], dtype=float)
        unique_scores, inverse = numpy.unique(scores, return_inverse=True)
        for result, rank in zip(results, inverse.ravel()):
            result[rank_key] = int(rank) + 1


    ####################################################################################################
    #### Record the scan/charge combinations of one input row. New combinations of the row share a new
    #### scan group ID. Returns the scan group ID of each combination
    def append_to_scan_group_details(self, scan_charge_list):

        current_scan_group_id = -1
        scan_group_ids = []
        for charge, scan in scan_charge_list:
            combo = f"{charge}_{scan}"
            if combo not in self.scan_group_combos:
                if current_scan_group_id < 0:
                    current_scan_group_id = self.next_scan_group_id
                    self.next_scan_group_id += 1
                self.scan_group_combos[combo] = current_scan_group_id
                self.scan_group_details.append({ 'scan_group_id': current_scan_group_id, 'charge': charge, 'scan': scan })
            scan_group_ids.append(self.scan_group_combos[combo])

        return scan_group_ids


    ####################################################################################################
    #### Write the scan group file, but only if some group holds more than one scan
    def write_scan_group_file(self, filepath):

        create_file = False
        for index in range(1, len(self.scan_group_details)):
            if self.scan_group_details[index]['scan_group_id'] == self.scan_group_details[index - 1]['scan_group_id']:
                create_file = True
                break
        if not create_file:
            return False

        with open(filepath, 'w') as outfile:
            outfile.write("Scan_Group_ID\tCharge\tScan\n")
            for detail in self.scan_group_details:
                outfile.write(f"{detail['scan_group_id']}\t{detail['charge']}\t{detail['scan']}\n")
        if self.verbose >= 1:
            eprint(f"INFO: Wrote {len(self.scan_group_details)} scan group entries to {filepath}")
        return True


    ####################################################################################################
    #### Write a header and rows of strings as a tab-delimited file
    def write_rows(self, filepath, header, rows):
        with open(filepath, 'w') as outfile:
            outfile.write("\t".join(header) + "\n")
            for row in rows:
                outfile.write("\t".join(row) + "\n")
        if self.verbose >= 1:
            eprint(f"INFO: Wrote {len(rows)} results to {filepath}")


    ####################################################################################################
    #### Name:Position list of a result's mods, ordered by position and then name
    @staticmethod
    def get_mod_description(modifications):
        ordered = sorted(modifications, key=lambda modification: (modification['position'], modification['name']))
        return ','.join([ f"{modification['name'].strip()}:{modification['position']}" for modification in ordered ])


    ####################################################################################################
    #### Write the _ModSummary, _ModDetails, _SeqInfo and _ResultToSeqMap files for results given in
    #### ResultID order. Each distinct clean sequence and mod description gets a Unique_Seq_ID
    def write_modification_files(self, base_path, ordered_results):

        occurrence_counts = {}
        unique_seq_ids = {}
        seq_info_rows = []
        mod_details_rows = []
        result_to_seq_rows = []

        for result_id, result in enumerate(ordered_results, start=1):
            modifications = sorted(result['Modifications'], key=lambda modification: (modification['position'], modification['name']))
            for modification in modifications:
                definition = modification.get('definition')
                if definition is not None:
                    occurrence_counts[definition] = occurrence_counts.get(definition, 0) + 1

            mod_description = self.get_mod_description(modifications)
            seq_key = (result['CleanSequence'], mod_description)
            if seq_key not in unique_seq_ids:
                unique_seq_id = len(unique_seq_ids) + 1
                unique_seq_ids[seq_key] = unique_seq_id
                seq_info_rows.append([ str(unique_seq_id), str(len(modifications)), mod_description, number_to_string(result['PeptideMass'], 5) ])
                for modification in modifications:
                    mod_details_rows.append([ str(unique_seq_id), modification['name'].strip(), str(modification['position']) ])
            result_to_seq_rows.append([ str(result_id), str(unique_seq_ids[seq_key]) ])

        #### CustomAA entries change residue masses and are not modifications
        mod_summary_rows = []
        for definition in self.catalog.definitions:
            if definition.mod_type == CUSTOM_AA:
                continue
            mod_summary_rows.append([ definition.symbol, number_to_string(definition.mass, 6), definition.residues,
                definition.get_type_symbol(), definition.name, str(occurrence_counts.get(definition, 0)) ])

        self.write_rows(base_path + '_ModSummary.txt', [ 'Modification_Symbol', 'Modification_Mass', 'Target_Residues',
            'Modification_Type', 'Mass_Correction_Tag', 'Occurrence_Count' ], mod_summary_rows)
        self.write_rows(base_path + '_ModDetails.txt', [ 'Unique_Seq_ID', 'Mass_Correction_Tag', 'Position' ], mod_details_rows)
        self.write_rows(base_path + '_SeqInfo.txt', [ 'Unique_Seq_ID', 'Mod_Count', 'Mod_Description', 'Monoisotopic_Mass' ], seq_info_rows)
        self.write_rows(base_path + '_ResultToSeqMap.txt', [ 'Result_ID', 'Unique_Seq_ID' ], result_to_seq_rows)
        self.status['counts']['n_unique_sequences'] = len(unique_seq_ids)


    ####################################################################################################
    #### Compare the mass computed here with the one reported by the search tool
    def validate_matching_monoisotopic_mass(self, tool_name, peptide, computed_mass, tool_mass):

        threshold = max(0.1, tool_mass / 5000 / 10)
        if abs(computed_mass - tool_mass) <= threshold:
            return True

        self.log_limited_warning(self.mass_mismatch_limiter, 'MassMismatch',
            f"The monoisotopic mass computed by PHRP is more than {threshold:.2f} Da away from the mass computed by {tool_name}: " +
            f"{computed_mass:.4f} vs. {tool_mass:.4f}; peptide {peptide[:27]}")
        return False


    ####################################################################################################
    #### Build the output file base path: output directory (or the input directory) plus the input name without extension
    def get_output_base_path(self, input_file, replacements=None):

        output_directory = self.options['output_directory']
        if output_directory is None or output_directory == '':
            output_directory = os.path.dirname(os.path.abspath(input_file))

        base_name = os.path.splitext(os.path.basename(input_file))[0]
        if replacements is not None:
            for old_text, new_text in replacements:
                base_name = re.sub(re.escape(old_text), new_text, base_name, flags=re.IGNORECASE)
        return os.path.join(output_directory, base_name)


    ####################################################################################################
    #### Summary of the processing, suitable for writing as JSON
    def get_summary(self):
        return json.loads(json.dumps(self.status))


####################################################################################################
#### Numeric helpers shared by the processors

def is_number(text):
    try:
        float(text)
        return True
    except (TypeError, ValueError):
        return False


def to_float_or_zero(text):
    try:
        return float(text)
    except (TypeError, ValueError):
        return 0.0


def to_int_safe(text, default=0):
    try:
        return int(text)
    except (TypeError, ValueError):
        pass
    try:
        return int(round(float(text)))
    except (TypeError, ValueError, OverflowError):
        return default


def number_to_string(value, digits_after_decimal, zero_threshold=0.0):
    """Format with a fixed number of decimals, then drop trailing zeros"""
    if abs(value) < zero_threshold:
        return '0'
    text = f"{value:.{digits_after_decimal}f}"
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    if text == '-0':
        text = '0'
    return text


def mass_error_to_string(mass_error):
    if abs(mass_error) < 1e-6:
        return '0'
    if abs(mass_error) < 0.0001:
        return number_to_string(mass_error, 6)
    return number_to_string(mass_error, 5)


def trim_zero_if_not_first_id(result_id, text):
    """Q-values of 0.0 print as 0 after the first row"""
    if result_id > 1 and text == '0.0':
        return '0'
    return text
