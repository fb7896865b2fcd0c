#!/usr/bin/env python3
import sys
def eprint(*args, **kwargs): print(*args, file=sys.stderr, **kwargs)

#### Import some standard modules
import os
import re
import argparse
import timeit
from datetime import datetime

from results_processor_base import ResultsProcessorBase, ResultsParseError, is_number, to_float_or_zero, to_int_safe, number_to_string, mass_error_to_string, trim_zero_if_not_first_id
from search_engine_params import SearchEngineParams
from modification_catalog import ParamFileModExtractor, CUSTOM_AA
from mod_text_resolver import MSGFPlusModTextResolver
from warning_limiter import WarningLimiter, BoundedMessageList
from cleavage_state_calculator import CleavageStateCalculator


####################################################################################################
#### MSGFPlusResultsProcessor class
class MSGFPlusResultsProcessor(ResultsProcessorBase):
    """
    Convert an MS-GF+ (or legacy MSGFDB) .tsv results file into synopsis and first-hits files.

    The synopsis file keeps every PSM passing the EValue / SpecEValue / QValue filter; the
    first-hits file keeps the best PSM for each scan and charge.
    """

    COLUMN_SYNONYMS = {
        'SpectrumFile': [ '#SpecFile' ],
        'SpecIndex': [ 'SpecIndex', 'SpecID' ],
        'Scan': [ 'Scan#', 'ScanNum' ],
        'ScanTimeMinutes': [ 'ScanTime(Min)' ],
        'FragMethod': [ 'FragMethod' ],
        'PrecursorMZ': [ 'Precursor' ],
        'IsotopeError': [ 'IsotopeError' ],
        'PMErrorDa': [ 'PMError(Da)', 'PrecursorError(Da)' ],
        'PMErrorPPM': [ 'PMError(ppm)', 'PrecursorError(ppm)' ],
        'Charge': [ 'Charge' ],
        'Peptide': [ 'Peptide' ],
        'Protein': [ 'Protein' ],
        'DeNovoScore': [ 'DeNovoScore' ],
        'MSGFScore': [ 'MSGFScore' ],
        'SpecEValue': [ 'SpecProb', 'SpecEValue' ],
        'EValue': [ 'P-value', 'EValue' ],
        'QValue': [ 'FDR', 'QValue' ],
        'PepQValue': [ 'PepFDR', 'PepQValue' ],
        'EFDR': [ 'EFDR' ],
        'IMSScan': [ 'IMS_Scan' ],
        'IMSDriftTime': [ 'IMS_Drift_Time' ],
    }

    MIN_COLUMN_COUNT = 13
    PROTEIN_LIST_REGEX = re.compile(r'([^;]+)\(pre=(.),post=(.)\)')

    ####################################################################################################
    #### Constructor
    def __init__(self, options=None, verbose=0):

        super().__init__(options=options, verbose=verbose)

        self.tool_name = 'MS-GF+'
        self.error_messages = BoundedMessageList(max_messages=None, max_characters=4096)
        self.precursor_mass_tolerance = { 'left': 0.0, 'right': 0.0, 'is_ppm': False }
        self.precursor_error_limiter = WarningLimiter()
        self.numeric_mod_limiter = WarningLimiter(max_reported=250,
            suppression_message='Too many numeric mod mass results have been found; suppressing further logging')
        self.resolver = None
        self.spec_id_to_index = {}
        self.n_results_created = 0

        #### Schema flags detected from the header line
        self.schema = { 'include_fdr': False, 'include_efdr': False, 'include_ims': False, 'is_msgf_plus': False }


    ####################################################################################################
    #### Read the MS-GF+ parameter file for the precursor tolerance, charge carrier and modifications
    def load_search_engine_parameters(self):

        param_file = self.options['search_tool_parameter_file']
        if param_file is None or param_file == '':
            self.log_event('WARNING', 'NoParamFile', f"{self.tool_name} parameter file not defined; numeric mod masses will not be converted to symbols")
            return True

        search_engine_params = SearchEngineParams(param_file, verbose=self.verbose)
        result = search_engine_params.read()
        if result == 'MISSING':
            self.log_event('ERROR', 'ParamFileNotFound', f"{self.tool_name} parameter file not found: {param_file}")
            return False
        if result == 'EMPTY':
            self.log_event('ERROR', 'EmptyParamFile', f"{self.tool_name} parameter file is empty: {param_file}")
            return False

        self.precursor_mass_tolerance = search_engine_params.get_precursor_mass_tolerance()

        charge_carrier_mass = search_engine_params.get_charge_carrier_mass()
        if charge_carrier_mass is not None:
            if self.verbose >= 1:
                eprint(f"INFO: Using a charge carrier mass of {charge_carrier_mass:.3f} Da")
            self.mass_calculator.charge_carrier_mass = charge_carrier_mass

        extractor = ParamFileModExtractor(tool_name=self.tool_name, mass_calculator=self.mass_calculator, verbose=self.verbose)
        success, definitions = extractor.extract_mod_info_from_param_file(param_file, 'msgfplus')
        for message in extractor.warnings:
            self.log_event('WARNING', 'ModDefinition', message)
        if not success:
            self.log_event('ERROR', 'ModExtractionFailed', extractor.error_message)
            return False

        for definition in definitions:
            if definition.mod_type == CUSTOM_AA:
                self.mass_calculator.set_amino_acid_mass(definition.residues[:1], definition.mass)
            self.catalog.add_definition(definition)
        self.catalog.assign_symbols()
        return True


    ####################################################################################################
    #### Process one MS-GF+ results file, writing the first-hits and synopsis files
    def process_file(self, input_file):

        t0 = timeit.default_timer()
        if not os.path.isfile(input_file):
            self.log_event('ERROR', 'InputFileNotFound', f"Input file '{input_file}' not found")
            return False

        if not self.load_search_engine_parameters():
            return False

        results = self.read_results_file(input_file)
        if results is None:
            return False

        self.sort_and_rank_results(results)
        base_path = self.get_output_base_path(input_file, [ ('_msgfdb', '_msgfplus') ])

        if self.options['create_first_hits_file']:
            if self.options['fasta_file']:
                self.cache_protein_names_from_fasta()
            first_hits = self.select_first_hits(results)
            self.write_results_file(base_path + '_fht.txt', first_hits)
            self.status['counts']['n_first_hits'] = len(first_hits)

        if self.options['create_synopsis_file']:
            synopsis = self.select_synopsis(results)
            ordered_synopsis = self.write_results_file(base_path + '_syn.txt', synopsis)
            self.write_modification_files(base_path + '_syn', ordered_synopsis)
            self.write_scan_group_file(base_path + '_ScanGroupInfo.txt')
            self.status['counts']['n_synopsis'] = len(synopsis)

        self.status['counts']['n_results'] = len(results)
        self.status['counts']['n_numeric_mod_errors'] = self.numeric_mod_limiter.count

        if len(self.error_messages) > 0:
            self.log_event('WARNING', 'InvalidLines', "Invalid Lines: \n" + self.error_messages.joined())

        t1 = timeit.default_timer()
        if self.status['state']['status'] == 'OK':
            self.status['state']['message'] = f"Processed {input_file}"
        if self.verbose >= 1:
            eprint(f"\nINFO: Processed {len(results)} results from {input_file} in {t1-t0:.2f} sec")
        return True


    ####################################################################################################
    #### Read every row of the results file into a list of results
    def read_results_file(self, input_file):

        results = []
        column_mapping = None
        self.spec_id_to_index = {}

        with open(input_file) as infile:
            for line_number, line in enumerate(infile, start=1):
                if self.abort_processing:
                    self.log_event('WARNING', 'Aborted', f"Processing of {input_file} aborted")
                    break
                self.report_progress()

                line = line.rstrip('\r\n')
                if line.strip() == '':
                    continue

                if column_mapping is None:
                    column_mapping = self.parse_header_line(line)
                    continue

                results.extend(self.parse_results_line(line, column_mapping, line_number))

        if column_mapping is None:
            self.log_event('ERROR', 'EmptyInputFile', f"No header line found in {input_file}")
            return None

        return results


    ####################################################################################################
    #### Map the header columns and detect which variant of the output this is
    def parse_header_line(self, line):

        column_mapping = self.build_column_mapping(line.split('\t'), self.COLUMN_SYNONYMS)

        self.schema['include_fdr'] = 'QValue' in column_mapping or 'PepQValue' in column_mapping
        self.schema['include_efdr'] = not self.schema['include_fdr'] and 'EFDR' in column_mapping
        self.schema['include_ims'] = 'IMSDriftTime' in column_mapping
        self.schema['is_msgf_plus'] = 'IsotopeError' in column_mapping
        if self.schema['is_msgf_plus']:
            self.tool_name = 'MS-GF+'
        else:
            self.tool_name = 'MSGFDB'

        self.resolver = MSGFPlusModTextResolver(self.catalog, is_msgf_plus=self.schema['is_msgf_plus'], verbose=self.verbose)

        if self.verbose >= 1:
            eprint(f"INFO: Header flags: {self.schema}")
        return column_mapping


    ####################################################################################################
    #### Parse one data row into one result per merged scan and per protein. The row index is the
    #### line number in the input file
    def parse_results_line(self, line, column_mapping, line_number=0):

        fields = line.rstrip().split('\t')
        row_index = str(line_number)
        if len(fields) < self.MIN_COLUMN_COUNT:
            self.error_messages.append(f"Row {row_index} has fewer than {self.MIN_COLUMN_COUNT} columns: {fields[0]}")
            return []

        try:
            return self.parse_results_fields(fields, column_mapping, row_index)
        except Exception as error:
            self.error_messages.append(f"Error parsing {self.tool_name} results for RowIndex '{row_index}': {error}")
            return []


    ####################################################################################################
    def parse_results_fields(self, fields, column_mapping, row_index):

        def get_value(column_name):
            return self.get_column_value(fields, column_mapping, column_name)

        def require_value(column_name):
            if column_name not in column_mapping or column_mapping[column_name] >= len(fields):
                raise ResultsParseError(f"{column_name} column is missing or invalid")
            return fields[column_mapping[column_name]].strip()

        spectrum_file = require_value('SpectrumFile')
        scan_text = require_value('Scan')
        peptide = require_value('Peptide')
        if peptide == '':
            raise ResultsParseError("Peptide column is missing or invalid")

        merged_scans = self.split_merged_scans(scan_text, get_value('SpecIndex'), get_value('FragMethod'))

        charge = get_value('Charge')
        charge_num = to_int_safe(charge, 0)
        precursor_mz = get_value('PrecursorMZ')

        #### Use the ppm column when present; otherwise start from the Da column
        pm_error_da = ''
        pm_error_ppm = ''
        if 'PMErrorPPM' in column_mapping:
            pm_error_ppm = get_value('PMErrorPPM')
        else:
            pm_error_da = get_value('PMErrorDa')

        #### A reported ppm error far outside the search tolerance is recomputed from the precursor m/z
        ppm_distrusted = False
        if pm_error_ppm != '' and is_number(precursor_mz) and is_number(pm_error_ppm):
            ppm_value = float(pm_error_ppm)
            tolerance = self.precursor_mass_tolerance
            if tolerance['is_ppm'] and (ppm_value < -tolerance['left'] * 1.5 or ppm_value > tolerance['right'] * 1.5):
                self.log_limited_warning(self.precursor_error_limiter, 'PrecursorErrorTooLarge',
                    f"Precursor mass error computed by {self.tool_name} is 1.5-fold larger than the search tolerance: " +
                    f"{pm_error_ppm} vs. {tolerance['left']:.0f}ppm,{tolerance['right']:.0f}ppm")
                ppm_distrusted = True

        #### Proteins, with the prefix and suffix residues of each
        protein, protein_info = self.split_protein_list(get_value('Protein'))
        if len(protein_info) == 0:
            protein_info = { protein: None }

        #### Resolve the mods once per protein, since terminal mods depend on the context residues
        protein_results = []
        for protein_name, terminus_residues in protein_info.items():
            protein_peptide = peptide
            if terminus_residues is not None:
                protein_peptide = self.add_update_prefix_and_suffix_residues(peptide, terminus_residues[0], terminus_residues[1])

            resolved = self.resolver.resolve(self.replace_terminus(protein_peptide))
            if not resolved.success and len(protein_results) == 0:
                self.log_limited_warning(self.numeric_mod_limiter, 'UnresolvedModMass',
                    "Search result contains a numeric mod mass that could not be associated with a modification symbol; " +
                    f"RowIndex = {row_index}, ModMass = {self.resolver.find_unresolved_mass(resolved.peptide)}")

            clean_sequence = CleavageStateCalculator.get_clean_sequence(resolved.peptide)
            peptide_mass = self.mass_calculator.compute_sequence_mass(clean_sequence) + resolved.total_mod_mass
            del_m, del_m_ppm = self.compute_precursor_mass_error(precursor_mz, charge_num, peptide_mass, pm_error_da, pm_error_ppm, ppm_distrusted)

            protein_results.append({
                'Protein': protein_name,
                'Peptide': resolved.peptide,
                'NTT': str(self.cleavage_calculator.compute_cleavage_state(resolved.peptide)),
                'CleanSequence': clean_sequence,
                'PeptideMass': peptide_mass,
                'TotalModMass': resolved.total_mod_mass,
                'Modifications': resolved.modifications,
                'MH': number_to_string(self.mass_calculator.convolute_mass(peptide_mass, 0), 6),
                'DelM': del_m,
                'DelM_PPM': del_m_ppm,
            })

        #### Scores; unparsable values count as 0
        spec_evalue = get_value('SpecEValue')
        evalue = get_value('EValue')
        qvalue = get_value('QValue')
        qvalue_num = to_float_or_zero(qvalue)
        pep_qvalue = ''
        if 'QValue' in column_mapping:
            pep_qvalue = get_value('PepQValue')
        else:
            qvalue = get_value('EFDR')

        base_result = {
            'SpectrumFile': spectrum_file,
            'Charge': charge,
            'ChargeNum': charge_num,
            'PrecursorMZ': precursor_mz,
            'DeNovoScore': get_value('DeNovoScore'),
            'MSGFScore': get_value('MSGFScore'),
            'SpecEValue': spec_evalue,
            'SpecEValueNum': to_float_or_zero(spec_evalue),
            'EValue': evalue,
            'EValueNum': to_float_or_zero(evalue),
            'QValue': qvalue,
            'QValueNum': qvalue_num,
            'PepQValue': pep_qvalue,
            'IsotopeError': get_value('IsotopeError'),
            'IMSScan': get_value('IMSScan'),
            'IMSDriftTime': get_value('IMSDriftTime'),
            'RowIndex': row_index,
        }

        scan_group_ids = self.append_to_scan_group_details([ (charge_num, merged_scan['ScanNum']) for merged_scan in merged_scans ])

        row_results = []
        for merged_scan, scan_group_id in zip(merged_scans, scan_group_ids):
            for protein_result in protein_results:
                result = dict(base_result, **merged_scan)
                result.update(protein_result)
                result['ScanGroupID'] = scan_group_id
                result['InputOrder'] = self.n_results_created
                self.n_results_created += 1
                row_results.append(result)

        return row_results


    ####################################################################################################
    #### DelM and DelM_PPM for one peptide mass. The ppm value is converted to Da when trusted;
    #### otherwise the error is taken from the precursor m/z and the C13-corrected ppm is reported
    def compute_precursor_mass_error(self, precursor_mz, charge_num, peptide_mass, pm_error_da, pm_error_ppm, ppm_distrusted):

        precursor_error_da = to_float_or_zero(pm_error_da)
        if pm_error_ppm != '' and is_number(precursor_mz) and is_number(pm_error_ppm):
            if ppm_distrusted:
                precursor_mono_mass = self.mass_calculator.convolute_mass(float(precursor_mz), charge_num, 0)
                precursor_error_da = precursor_mono_mass - peptide_mass
                pm_error_ppm = ''
            else:
                precursor_error_da = self.mass_calculator.ppm_to_mass(float(pm_error_ppm), peptide_mass)
                pm_error_da = mass_error_to_string(precursor_error_da)

        if pm_error_ppm == '' and is_number(precursor_mz):
            precursor_mono_mass = self.mass_calculator.convolute_mass(float(precursor_mz), charge_num, 0)
            corrected_ppm = self.mass_calculator.compute_delm_corrected_ppm(precursor_error_da, precursor_mono_mass, peptide_mass, True)
            pm_error_ppm = number_to_string(corrected_ppm, 5, 0.00005)
            if pm_error_da == '':
                pm_error_da = mass_error_to_string(self.mass_calculator.ppm_to_mass(corrected_ppm, peptide_mass))

        return pm_error_da, pm_error_ppm


    ####################################################################################################
    #### Split 3010/3011 style merged scans, along with their SpecIndex and FragMethod values
    def split_merged_scans(self, scan_text, spec_index_text, frag_method_text):

        if scan_text.find('/') > 0:
            scans = scan_text.split('/')
            spec_indexes = spec_index_text.split('/')
            frag_methods = frag_method_text.split('/')
        else:
            scans = [ scan_text ]
            spec_indexes = [ spec_index_text ]
            frag_methods = [ frag_method_text ]

        merged_scans = []
        for index, scan in enumerate(scans):
            spec_index = spec_indexes[index] if index < len(spec_indexes) else ''
            frag_method = frag_methods[index] if index < len(frag_methods) else ''
            if self.schema['is_msgf_plus']:
                spec_index = self.normalize_spec_index(spec_index)
            merged_scans.append({ 'Scan': scan, 'ScanNum': to_int_safe(scan, 0), 'SpecIndex': spec_index, 'FragMethod': frag_method })

        return merged_scans


    ####################################################################################################
    #### MS-GF+ may report SpecIDs like index=123 or controllerType=0 scan=5; make them integers
    def normalize_spec_index(self, spec_index):

        try:
            int(spec_index)
            return spec_index
        except ValueError:
            pass

        if spec_index.startswith('index='):
            index_text = spec_index[len('index='):]
            try:
                int(index_text)
                return index_text
            except ValueError:
                spec_index = index_text

        if spec_index not in self.spec_id_to_index:
            self.spec_id_to_index[spec_index] = len(self.spec_id_to_index) + 1
        return str(self.spec_id_to_index[spec_index])


    ####################################################################################################
    #### Split Prot1(pre=K,post=G);Prot2(pre=R,post=A) into the first protein and an ordered dict
    #### of protein name to (prefix, suffix)
    def split_protein_list(self, protein_list):

        protein_info = {}
        for match in self.PROTEIN_LIST_REGEX.finditer(protein_list):
            protein_name = self.truncate_protein_name(match.group(1))
            if protein_name not in protein_info:
                protein_info[protein_name] = (match.group(2), match.group(3))

        if len(protein_info) == 0:
            return self.truncate_protein_name(protein_list), protein_info
        return next(iter(protein_info)), protein_info


    ####################################################################################################
    #### MSGFDB writes the protein termini as _ rather than -
    @staticmethod
    def replace_terminus(peptide):
        if peptide.startswith('_.'):
            peptide = '-.' + peptide[2:]
        if peptide.endswith('._'):
            peptide = peptide[:-2] + '.-'
        return peptide


    ####################################################################################################
    #### Sort by scan, charge, score, peptide and protein; then rank within each scan
    def sort_and_rank_results(self, results):
        results.sort(key=lambda result: (result['ScanNum'], result['ChargeNum'], result['SpecEValueNum'], result['Peptide'], result['Protein']))
        for scan_run in self.split_into_scan_runs(results):
            self.assign_ranks(scan_run, 'SpecEValueNum', 'RankSpecEValue')


    ####################################################################################################
    def passes_synopsis_filter(self, result):
        if result['EValueNum'] <= self.options['msgfplus_synopsis_evalue_threshold']:
            return True
        if result['SpecEValueNum'] <= self.options['msgfplus_synopsis_spec_evalue_threshold']:
            return True
        if 0 < result['QValueNum'] < self.options['msgfplus_synopsis_qvalue_threshold']:
            return True
        return False


    ####################################################################################################
    #### Keep the filter-passing results of each scan, skipping duplicates
    def select_synopsis(self, results):

        synopsis = []
        for scan_run in self.split_into_scan_runs(results):
            seen_keys = set()
            for result in scan_run:
                if not self.passes_synopsis_filter(result):
                    continue
                key = f"{result['Peptide']}_{result['Protein']}_{result['MH']}_{result['SpecEValue']}"
                if key in seen_keys:
                    continue
                seen_keys.add(key)
                synopsis.append(result)

        return synopsis


    ####################################################################################################
    #### Keep the best result for each scan and charge, choosing its protein by FASTA order
    def select_first_hits(self, results):

        first_hits = []
        for scan_run in self.split_into_scan_runs(results):
            charge_group = []
            for result in scan_run:
                if len(charge_group) > 0 and result['ChargeNum'] != charge_group[0]['ChargeNum']:
                    first_hits.append(self.get_top_hit_with_best_protein(charge_group))
                    charge_group = []
                charge_group.append(result)
            if len(charge_group) > 0:
                first_hits.append(self.get_top_hit_with_best_protein(charge_group))

        return first_hits


    ####################################################################################################
    #### The first result of a sorted charge group, with the earliest protein matching its sequence
    def get_top_hit_with_best_protein(self, charge_group):

        top_hit = charge_group[0]
        candidates = [ result for result in charge_group if result['CleanSequence'] == top_hit['CleanSequence'] ]
        best_protein_result = min(candidates, key=lambda result: (self.get_protein_number(result['Protein']), result['InputOrder']))
        if best_protein_result is top_hit:
            return top_hit

        first_hit = dict(top_hit)
        first_hit['Protein'] = best_protein_result['Protein']
        primary_sequence, prefix, suffix = CleavageStateCalculator.split_prefix_and_suffix(best_protein_result['Peptide'])
        first_hit['Peptide'] = self.add_update_prefix_and_suffix_residues(top_hit['Peptide'], prefix, suffix)
        first_hit['NTT'] = str(self.cleavage_calculator.compute_cleavage_state(first_hit['Peptide']))
        return first_hit


    ####################################################################################################
    #### Column names of the synopsis and first-hits files
    def get_output_header(self):

        header = [ 'ResultID', 'Scan', 'FragMethod', 'SpecIndex', 'Charge', 'PrecursorMZ', 'DelM', 'DelM_PPM',
            'MH', 'Peptide', 'Protein', 'NTT', 'DeNovoScore', 'MSGFScore' ]

        if self.schema['is_msgf_plus']:
            header.extend([ 'MSGFPlus_SpecEValue', 'Rank_MSGFPlus_SpecEValue', 'EValue' ])
        else:
            header.extend([ 'MSGFDB_SpecProb', 'Rank_MSGFDB_SpecProb', 'PValue' ])

        if self.schema['include_fdr']:
            if self.schema['is_msgf_plus']:
                header.extend([ 'QValue', 'PepQValue' ])
            else:
                header.extend([ 'FDR', 'PepFDR' ])
        elif self.schema['include_efdr']:
            header.extend([ 'EFDR', 'PepFDR' ])

        if self.schema['is_msgf_plus']:
            header.append('IsotopeError')
        if self.schema['include_ims']:
            header.extend([ 'IMS_Scan', 'IMS_Drift_Time' ])
        return header


    ####################################################################################################
    def get_output_row(self, result_id, result):

        row = [ str(result_id), result['Scan'], result['FragMethod'], result['SpecIndex'], result['Charge'],
            result['PrecursorMZ'], result['DelM'], result['DelM_PPM'], result['MH'], result['Peptide'],
            result['Protein'], result['NTT'], result['DeNovoScore'], result['MSGFScore'],
            result['SpecEValue'], str(result['RankSpecEValue']), result['EValue'] ]

        if self.schema['include_fdr']:
            row.append(trim_zero_if_not_first_id(result_id, result['QValue']))
            row.append(trim_zero_if_not_first_id(result_id, result['PepQValue']))
        elif self.schema['include_efdr']:
            row.append(trim_zero_if_not_first_id(result_id, result['QValue']))
            row.append('1')

        if self.schema['is_msgf_plus']:
            row.append(result['IsotopeError'])
        if self.schema['include_ims']:
            row.append(result['IMSScan'])
            row.append(result['IMSDriftTime'])
        return row


    ####################################################################################################
    #### Sort by score, then scan, charge, peptide and protein, and write with sequential ResultIDs
    def write_results_file(self, filepath, results):
        ordered = sorted(results, key=lambda result: (result['SpecEValueNum'], result['ScanNum'], result['ChargeNum'], result['Peptide'], result['Protein']))
        rows = [ self.get_output_row(result_id, result) for result_id, result in enumerate(ordered, start=1) ]
        self.write_rows(filepath, self.get_output_header(), rows)
        return ordered


####################################################################################################
#### For command-line usage
def main():

    argparser = argparse.ArgumentParser(description='Creates synopsis and first-hits files from an MS-GF+ results file')
    argparser.add_argument('--param_file', action='store', help='MS-GF+ parameter file used for the search')
    argparser.add_argument('--fasta_file', action='store', help='FASTA file used for the search, for choosing among proteins')
    argparser.add_argument('--output_dir', action='store', help='Directory for the output files (defaults to the input file directory)')
    argparser.add_argument('--verbose', action='count', help='If set, print more information about ongoing processing' )
    argparser.add_argument('--version', action='version', version='%(prog)s 0.5')
    argparser.add_argument('file', type=str, help='MS-GF+ .tsv results file')
    params = argparser.parse_args()

    verbose = params.verbose
    if verbose is None:
        verbose = 0
    if verbose >= 1:
        timestamp = str(datetime.now().isoformat())
        eprint(f"INFO: Launching MS-GF+ results processing at {timestamp}")

    options = { 'search_tool_parameter_file': params.param_file, 'fasta_file': params.fasta_file, 'output_directory': params.output_dir }
    processor = MSGFPlusResultsProcessor(options=options, verbose=verbose)
    if not processor.process_file(params.file):
        sys.exit(1)


#### For command line usage
if __name__ == "__main__": main()
