#!/usr/bin/env python3
import sys
def eprint(*args, **kwargs): print(*args, file=sys.stderr, **kwargs)

#### Import some standard modules
import os
import re
import argparse
import timeit
from datetime import datetime

from results_processor_base import ResultsProcessorBase, ResultsParseError, is_number, to_float_or_zero, to_int_safe, number_to_string, mass_error_to_string
from search_engine_params import SearchEngineParams
from modification_catalog import ParamFileModExtractor
from mod_text_resolver import TopPICModTextResolver


####################################################################################################
#### TopPICResultsProcessor class
class TopPICResultsProcessor(ResultsProcessorBase):
    """
    Convert a TopPIC PrSM results file into a synopsis file.
    Proteoforms keep their bracketed modifications; DelM is reported relative to the adjusted precursor mass.
    """

    COLUMN_SYNONYMS = {
        'SpectrumFileName': [ 'Data file name' ],
        'Prsm_ID': [ 'Prsm ID' ],
        'Spectrum_ID': [ 'Spectrum ID' ],
        'FragMethod': [ 'Fragmentation' ],
        'Scans': [ 'Scan(s)' ],
        'RetentionTime': [ 'Retention time' ],
        'Peaks': [ '#peaks' ],
        'Charge': [ 'Charge' ],
        'Precursor_mass': [ 'Precursor mass' ],
        'Adjusted_precursor_mass': [ 'Adjusted precursor mass' ],
        'Proteoform_ID': [ 'Proteoform ID' ],
        'Feature_intensity': [ 'Feature intensity' ],
        'Feature_score': [ 'Feature score' ],
        'Protein_accession': [ 'Protein name', 'Protein accession' ],
        'Protein_description': [ 'Protein description' ],
        'First_residue': [ 'First residue' ],
        'Last_residue': [ 'Last residue' ],
        'Special_amino_acids': [ 'Special amino acids' ],
        'Proteoform': [ 'Proteoform' ],
        'Unexpected_modifications': [ '#unexpected modifications' ],
        'MIScore': [ 'MIScore' ],
        'Variable_PTMs': [ '#variable PTMs' ],
        'Variable_PTM_names': [ 'Variable PTMs' ],
        'Fixed_PTM_names': [ 'Fixed PTMs' ],
        'Matched_peaks': [ '#matched peaks' ],
        'Matched_fragment_ions': [ '#matched fragment ions' ],
        'Pvalue': [ 'P-value' ],
        'Evalue': [ 'E-value' ],
        'Qvalue': [ 'Q-value (spectral FDR)', 'Spectrum-level Q-value' ],
        'Proteoform_QValue': [ 'Proteoform FDR', 'Proteoform-level Q-value' ],
    }

    MIN_COLUMN_COUNT = 15

    ####################################################################################################
    #### Constructor
    def __init__(self, options=None, verbose=0):

        super().__init__(options=options, verbose=verbose)

        self.tool_name = 'TopPIC'
        self.resolver = TopPICModTextResolver(self.catalog, verbose=verbose)
        self.reported_unknown_mods = set()
        self.data_has_pvalues = False


    ####################################################################################################
    #### Read the modification definitions from the TopPIC parameter file
    def load_search_engine_parameters(self):

        param_file = self.options['search_tool_parameter_file']
        if param_file is None or param_file == '':
            self.log_event('WARNING', 'NoParamFile', f"{self.tool_name} parameter file not defined; named mods are looked up among common modification names only")
            return True

        search_engine_params = SearchEngineParams(param_file, verbose=self.verbose)
        result = search_engine_params.read()
        if result == 'MISSING':
            self.log_event('ERROR', 'ParamFileNotFound', f"{self.tool_name} parameter file not found: {param_file}")
            return False
        if result == 'EMPTY':
            self.log_event('ERROR', 'EmptyParamFile', f"{self.tool_name} parameter file is empty: {param_file}")
            return False

        extractor = ParamFileModExtractor(tool_name=self.tool_name, mass_calculator=self.mass_calculator, verbose=self.verbose)
        success, definitions = extractor.extract_mod_info_from_param_file(param_file, 'toppic')
        for message in extractor.warnings:
            self.log_event('WARNING', 'ModDefinition', message)
        if not success:
            self.log_event('ERROR', 'ModExtractionFailed', extractor.error_message)
            return False

        for definition in definitions:
            self.catalog.add_definition(definition)
        self.catalog.assign_symbols()
        return True


    ####################################################################################################
    #### Process one TopPIC results file, writing the synopsis file
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

        score_key = self.get_score_key()
        results.sort(key=lambda result: (result['ScanNum'], result['ChargeNum'], result[score_key], result['Proteoform'], result['Protein']))
        for scan_run in self.split_into_scan_runs(results):
            self.assign_ranks(scan_run, score_key, 'RankPValue')

        if self.options['create_synopsis_file']:
            synopsis = self.select_synopsis(results)
            base_path = self.get_output_base_path(input_file, [ ('_TopPIC_PrSMs', '_toppic'), ('_TopPIC_Proteoforms', '_toppic') ])
            ordered_synopsis = self.write_results_file(base_path + '_syn.txt', synopsis)
            self.write_modification_files(base_path + '_syn', ordered_synopsis)
            self.status['counts']['n_synopsis'] = len(synopsis)

        self.status['counts']['n_results'] = len(results)
        self.status['counts']['n_unknown_named_mods'] = len(self.resolver.unknown_named_mods)

        if len(self.error_messages) > 0:
            self.log_event('WARNING', 'InvalidLines', "Invalid Lines: \n" + self.error_messages.joined())

        t1 = timeit.default_timer()
        if self.status['state']['status'] == 'OK':
            self.status['state']['message'] = f"Processed {input_file}"
        if self.verbose >= 1:
            eprint(f"\nINFO: Processed {len(results)} results from {input_file} in {t1-t0:.2f} sec")
        return True


    ####################################################################################################
    def get_score_key(self):
        if self.data_has_pvalues:
            return 'PValueNum'
        return 'EValueNum'


    ####################################################################################################
    #### Read every row of the results file into a list of results
    def read_results_file(self, input_file):

        results = []
        column_mapping = None

        with open(input_file) as infile:
            for line in infile:
                if self.abort_processing:
                    self.log_event('WARNING', 'Aborted', f"Processing of {input_file} aborted")
                    break
                self.report_progress()

                line = line.rstrip('\r\n')
                if line.strip() == '':
                    continue

                if column_mapping is None:
                    column_mapping = self.build_column_mapping(line.split('\t'), self.COLUMN_SYNONYMS)
                    self.data_has_pvalues = 'Pvalue' in column_mapping
                    continue

                result = self.parse_results_line(line, column_mapping)
                if result is not None:
                    results.append(result)

        if column_mapping is None:
            self.log_event('ERROR', 'EmptyInputFile', f"No header line found in {input_file}")
            return None

        return results


    ####################################################################################################
    #### Parse one data row. Returns a result dict, or None if the row is skipped
    def parse_results_line(self, line, column_mapping):

        fields = line.rstrip().split('\t')
        if len(fields) < self.MIN_COLUMN_COUNT:
            self.error_messages.append(f"Row with fewer than {self.MIN_COLUMN_COUNT} columns: {fields[0]}")
            return None

        try:
            return self.parse_results_fields(fields, column_mapping)
        except Exception as error:
            self.error_messages.append(f"Error parsing {self.tool_name} results for RowIndex '{fields[0]}': {error}")
            return None


    ####################################################################################################
    def parse_results_fields(self, fields, column_mapping):

        def get_value(column_name):
            return self.get_column_value(fields, column_mapping, column_name)

        def require_value(column_name, label):
            if column_name not in column_mapping or column_mapping[column_name] >= len(fields):
                raise ResultsParseError(f"{label} column is missing or invalid")
            return fields[column_mapping[column_name]].strip()

        prsm_id = require_value('Prsm_ID', 'Prsm_ID')
        scans = require_value('Scans', 'Scan(s)')
        proteoform = require_value('Proteoform', 'Proteoform')

        scan_num = self.parse_scan_number(scans)
        charge = get_value('Charge')
        charge_num = to_int_safe(charge, 0)

        #### Precursor m/z from the precursor mass
        precursor_mono_mass = 0.0
        precursor_mz = 0.0
        precursor_mz_text = ''
        precursor_mass_text = get_value('Precursor_mass')
        if is_number(precursor_mass_text):
            precursor_mono_mass = float(precursor_mass_text)
            if charge_num > 0:
                precursor_mz = self.mass_calculator.convolute_mass(precursor_mono_mass, 0, charge_num)
                precursor_mz_text = number_to_string(precursor_mz, 6)

        adjusted_mass = 0.0
        if 'Adjusted_precursor_mass' in column_mapping:
            adjusted_mass = to_float_or_zero(get_value('Adjusted_precursor_mass'))

        #### Proteoform mass from its residues and bracketed mods
        proteoform = self.replace_terminus(proteoform)
        resolved = self.resolver.resolve(proteoform)
        for modification in resolved.modifications:
            if not modification['known'] and modification['name'] not in self.reported_unknown_mods:
                self.reported_unknown_mods.add(modification['name'])
                self.log_event('WARNING', 'UnrecognizedNamedMod', f"Unrecognized named mod: {modification['name']}; its mass is not included in the proteoform mass")
        clean_sequence = self.resolver.get_clean_sequence(proteoform)
        peptide_mass = self.mass_calculator.compute_sequence_mass(clean_sequence) + resolved.total_mod_mass

        if abs(adjusted_mass) < 1e-10:
            adjusted_mass = peptide_mass
        self.validate_matching_monoisotopic_mass(self.tool_name, proteoform, peptide_mass, adjusted_mass)

        del_m = ''
        del_m_ppm = ''
        if adjusted_mass > 0:
            delta_mass = precursor_mono_mass - adjusted_mass
            del_m = mass_error_to_string(delta_mass)
            reference_mz = precursor_mz if precursor_mz > 0 else 1000
            del_m_ppm = number_to_string(self.mass_calculator.mass_to_ppm(delta_mass, reference_mz), 5, 0.00005)

        pvalue = get_value('Pvalue')
        evalue = get_value('Evalue')

        result = {
            'SpectrumFileName': get_value('SpectrumFileName'),
            'Prsm_ID': prsm_id,
            'Spectrum_ID': get_value('Spectrum_ID'),
            'FragMethod': get_value('FragMethod'),
            'Scans': scans,
            'ScanNum': scan_num,
            'Charge': charge,
            'ChargeNum': charge_num,
            'PrecursorMZ': precursor_mz_text,
            'DelM': del_m,
            'DelM_PPM': del_m_ppm,
            'MH': number_to_string(self.mass_calculator.convolute_mass(peptide_mass, 0), 6),
            'PeptideMass': peptide_mass,
            'Proteoform': proteoform,
            'CleanSequence': clean_sequence,
            'TotalModMass': resolved.total_mod_mass,
            'Modifications': resolved.modifications,
            'Proteoform_ID': get_value('Proteoform_ID'),
            'Feature_Intensity': get_value('Feature_intensity'),
            'Feature_Score': get_value('Feature_score'),
            'Protein': self.truncate_protein_name(get_value('Protein_accession')),
            'ProteinDescription': get_value('Protein_description'),
            'ResidueStart': get_value('First_residue'),
            'ResidueEnd': get_value('Last_residue'),
            'Unexpected_Mod_Count': self.assure_integer(get_value('Unexpected_modifications')),
            'Peaks': self.assure_integer(get_value('Peaks')),
            'Matched_peaks': self.assure_integer(get_value('Matched_peaks')),
            'Matched_fragment_ions': self.assure_integer(get_value('Matched_fragment_ions')),
            'MIScore': get_value('MIScore'),
            'VariablePTMs': get_value('Variable_PTMs'),
            'PValue': pvalue,
            'PValueNum': to_float_or_zero(pvalue),
            'EValue': evalue,
            'EValueNum': to_float_or_zero(evalue),
            'QValue': self.clean_qvalue(get_value('Qvalue')),
            'Proteoform_QValue': get_value('Proteoform_QValue'),
        }
        return result


    ####################################################################################################
    #### Scan(s) is normally an integer; a list of scans such as "1500 1501" gives its first scan
    def parse_scan_number(self, scans):
        try:
            return int(scans)
        except ValueError:
            pass
        match = re.match(r'\D*(\d+)', scans)
        if match:
            return int(match.group(1))
        self.log_event('WARNING', 'ScanNumberNotFound', f"Error parsing out the scan number from the scan list; could not find an integer: {scans}")
        return 0


    ####################################################################################################
    #### TopPIC writes a bare period at the protein termini
    @staticmethod
    def replace_terminus(proteoform):
        if proteoform.startswith('.'):
            proteoform = '-' + proteoform
        if proteoform.endswith('.'):
            proteoform = proteoform + '-'
        return proteoform


    ####################################################################################################
    #### Count columns are sometimes written as 3.0
    @staticmethod
    def assure_integer(text, default='0'):
        if text.endswith('.0'):
            text = text[:-2]
        try:
            return str(int(text))
        except ValueError:
            pass
        try:
            return str(int(round(float(text))))
        except (ValueError, OverflowError):
            return default


    @staticmethod
    def clean_qvalue(qvalue):
        if qvalue.lower() == 'infinity':
            return '10'
        if qvalue != '' and not is_number(qvalue):
            return ''
        return qvalue


    ####################################################################################################
    def select_synopsis(self, results):
        score_key = self.get_score_key()
        threshold = self.options['toppic_synopsis_pvalue_threshold']
        return [ result for result in results if result[score_key] <= threshold ]


    ####################################################################################################
    def get_output_header(self):
        header = [ 'ResultID', 'Scan', 'Prsm_ID', 'Spectrum_ID', 'FragMethod', 'Charge', 'PrecursorMZ', 'DelM', 'DelM_PPM',
            'MH', 'Peptide', 'Proteoform_ID', 'Feature_Intensity', 'Feature_Score', 'Protein', 'ResidueStart', 'ResidueEnd',
            'Unexpected_Mod_Count', 'Peak_Count', 'Matched_Peak_Count', 'Matched_Fragment_Ion_Count' ]
        if self.data_has_pvalues:
            header.extend([ 'PValue', 'Rank_PValue' ])
        header.extend([ 'EValue', 'QValue', 'ProteoformFDR', 'VariablePTMs' ])
        return header


    def get_output_row(self, result_id, result):
        row = [ str(result_id), str(result['ScanNum']), result['Prsm_ID'], result['Spectrum_ID'], result['FragMethod'],
            result['Charge'], result['PrecursorMZ'], result['DelM'], result['DelM_PPM'], result['MH'], result['Proteoform'],
            result['Proteoform_ID'], result['Feature_Intensity'], result['Feature_Score'], result['Protein'],
            result['ResidueStart'], result['ResidueEnd'], result['Unexpected_Mod_Count'], result['Peaks'],
            result['Matched_peaks'], result['Matched_fragment_ions'] ]
        if self.data_has_pvalues:
            row.extend([ result['PValue'], str(result['RankPValue']) ])
        row.extend([ result['EValue'], result['QValue'], result['Proteoform_QValue'], result['VariablePTMs'] ])
        return row


    ####################################################################################################
    #### Sort by score, then scan, charge, proteoform and protein, and write with sequential ResultIDs
    def write_results_file(self, filepath, results):
        score_key = self.get_score_key()
        ordered = sorted(results, key=lambda result: (result[score_key], result['ScanNum'], result['ChargeNum'], result['Proteoform'], result['Protein']))
        rows = [ self.get_output_row(result_id, result) for result_id, result in enumerate(ordered, start=1) ]
        self.write_rows(filepath, self.get_output_header(), rows)
        return ordered


####################################################################################################
#### For command-line usage
def main():

    argparser = argparse.ArgumentParser(description='Creates a synopsis file from a TopPIC PrSMs results file')
    argparser.add_argument('--param_file', action='store', help='TopPIC parameter file with the modification definitions')
    argparser.add_argument('--pvalue_threshold', action='store', type=float, help='Synopsis P-value threshold (default 0.95)')
    argparser.add_argument('--output_dir', action='store', help='Directory for the output files (defaults to the input file directory)')
    argparser.add_argument('--verbose', action='count', help='If set, print more information about ongoing processing' )
    argparser.add_argument('--version', action='version', version='%(prog)s 0.5')
    argparser.add_argument('file', type=str, help='TopPIC _TopPIC_PrSMs.txt results file')
    params = argparser.parse_args()

    verbose = params.verbose
    if verbose is None:
        verbose = 0
    if verbose >= 1:
        timestamp = str(datetime.now().isoformat())
        eprint(f"INFO: Launching TopPIC results processing at {timestamp}")

    options = { 'search_tool_parameter_file': params.param_file, 'toppic_synopsis_pvalue_threshold': params.pvalue_threshold, 'output_directory': params.output_dir }
    processor = TopPICResultsProcessor(options=options, verbose=verbose)
    if not processor.process_file(params.file):
        sys.exit(1)


#### For command line usage
if __name__ == "__main__": main()
