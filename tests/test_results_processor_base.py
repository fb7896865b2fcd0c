import sys
import os
import pytest
from deepdiff import DeepDiff

sys.path.append(os.path.dirname(os.path.realpath(__file__)) + "/../lib")
from results_processor_base import ResultsProcessorBase, MAX_PROTEIN_NUMBER
from results_processor_base import is_number, to_float_or_zero, to_int_safe, number_to_string, mass_error_to_string, trim_zero_if_not_first_id


def test_add_update_prefix_and_suffix_residues():
    update = ResultsProcessorBase.add_update_prefix_and_suffix_residues
    assert update('K.PEPTIDE.R', '-', 'G') == '-.PEPTIDE.G'
    assert update('PEPTIDE', 'K', 'R') == 'K.PEPTIDE.R'
    assert update('K.PEP*TIDE.-', 'R', 'A') == 'R.PEP*TIDE.A'


def test_assign_ranks_1():
    results = [ { 'Score': 1e-10 }, { 'Score': 1e-10 }, { 'Score': 1e-5 }, { 'Score': 0.1 } ]
    ResultsProcessorBase.assign_ranks(results, 'Score', 'Rank')
    assert [ result['Rank'] for result in results ] == [ 1, 1, 2, 3 ]


def test_assign_ranks_monotonic():
    results = [ { 'Score': score } for score in [ 0.5, 1e-12, 0.5, 3.0, 1e-3 ] ]
    ResultsProcessorBase.assign_ranks(results, 'Score', 'Rank')
    for first in results:
        for second in results:
            if first['Score'] < second['Score']:
                assert first['Rank'] < second['Rank']
            elif first['Score'] == second['Score']:
                assert first['Rank'] == second['Rank']


def test_split_into_scan_runs():
    results = [ { 'ScanNum': 1 }, { 'ScanNum': 1 }, { 'ScanNum': 2 }, { 'ScanNum': 5 } ]
    runs = list(ResultsProcessorBase.split_into_scan_runs(results))
    assert [ len(run) for run in runs ] == [ 2, 1, 1 ]


def test_scan_groups(tmp_path):
    processor = ResultsProcessorBase()
    assert processor.append_to_scan_group_details([ (2, 100), (2, 101) ]) == [ 1, 1 ]
    assert processor.append_to_scan_group_details([ (2, 100) ]) == [ 1 ]
    assert processor.append_to_scan_group_details([ (3, 100) ]) == [ 2 ]

    filepath = os.path.join(tmp_path, 'Job_ScanGroupInfo.txt')
    assert processor.write_scan_group_file(filepath)
    with open(filepath) as infile:
        lines = infile.read().splitlines()
    assert lines == [ 'Scan_Group_ID\tCharge\tScan', '1\t2\t100', '1\t2\t101', '2\t3\t100' ]


def test_scan_group_file_not_needed(tmp_path):
    processor = ResultsProcessorBase()
    processor.append_to_scan_group_details([ (2, 100) ])
    processor.append_to_scan_group_details([ (2, 101) ])
    filepath = os.path.join(tmp_path, 'Job_ScanGroupInfo.txt')
    assert not processor.write_scan_group_file(filepath)
    assert not os.path.exists(filepath)


def test_column_mapping():
    processor = ResultsProcessorBase()
    column_mapping = processor.build_column_mapping([ 'Scan#', 'Charge', 'Extra' ], { 'Scan': [ 'Scan#', 'ScanNum' ], 'Charge': [ 'Charge' ] })
    assert dict(column_mapping) == { 'Scan': 0, 'Charge': 1 }
    assert processor.status['problems']['warnings']['codes'] == { 'UnrecognizedColumn': 1 }
    with pytest.raises(TypeError):
        column_mapping['Scan'] = 5
    assert processor.get_column_value([ '100', ' 2 ' ], column_mapping, 'Charge') == '2'
    assert processor.get_column_value([ '100' ], column_mapping, 'Charge', 'none') == 'none'


def test_log_event():
    processor = ResultsProcessorBase()
    processor.log_event('WARNING', 'Something', 'A warning')
    assert processor.status['state']['status'] == 'OK'
    processor.log_event('ERROR', 'Broken', 'An error')
    assert processor.status['state'] == { 'status': 'ERROR', 'code': 'Broken', 'message': 'An error' }
    assert processor.status['problems']['errors']['list'] == [ 'ERROR: [Broken]: An error' ]
    with pytest.raises(ValueError):
        processor.log_event('INFO', 'Info', 'Not a problem')
    summary = processor.get_summary()
    expected_problems = {
        'warnings': { 'count': 1, 'list': [ 'WARNING: [Something]: A warning' ], 'codes': { 'Something': 1 } },
        'errors': { 'count': 1, 'list': [ 'ERROR: [Broken]: An error' ], 'codes': { 'Broken': 1 } },
    }
    assert DeepDiff(summary['problems'], expected_problems) == {}


def test_protein_order_from_fasta(tmp_path):
    fasta_file = os.path.join(tmp_path, 'proteins.fasta')
    with open(fasta_file, 'w') as outfile:
        outfile.write(">Prot2 Second protein\nPEPTIDEK\n>Prot1 First protein\nACDEFGHIK\n>Prot2 duplicate\nMMMM\n")
    processor = ResultsProcessorBase(options={ 'fasta_file': fasta_file })
    assert processor.cache_protein_names_from_fasta()
    assert processor.get_protein_number('Prot2') == 1
    assert processor.get_protein_number('Prot1') == 2
    assert processor.get_protein_number('Prot9') == MAX_PROTEIN_NUMBER


def test_missing_fasta(tmp_path):
    processor = ResultsProcessorBase(options={ 'fasta_file': os.path.join(tmp_path, 'none.fasta') })
    assert not processor.cache_protein_names_from_fasta()
    assert processor.status['problems']['warnings']['codes'] == { 'FastaFileNotFound': 1 }


def test_mass_validation():
    processor = ResultsProcessorBase()
    assert processor.validate_matching_monoisotopic_mass('MS-GF+', 'K.PEPTIDE.R', 1000.0, 1000.05)
    assert not processor.validate_matching_monoisotopic_mass('MS-GF+', 'K.PEPTIDE.R', 1000.0, 1001.0)
    assert processor.mass_mismatch_limiter.count == 1


def test_output_base_path(tmp_path):
    processor = ResultsProcessorBase(options={ 'output_directory': str(tmp_path) })
    base_path = processor.get_output_base_path('/data/Job123_MSGFDB.tsv', [ ('_msgfdb', '_msgfplus') ])
    assert base_path == os.path.join(str(tmp_path), 'Job123_msgfplus')


def test_truncate_protein_name():
    assert ResultsProcessorBase.truncate_protein_name('sp|P12345|PROT_HUMAN Some protein') == 'sp|P12345|PROT_HUMAN'
    assert ResultsProcessorBase.truncate_protein_name(' Prot1 ') == 'Prot1'


def test_number_helpers():
    assert is_number('1.5E-3')
    assert not is_number('abc')
    assert to_float_or_zero('n/a') == 0.0
    assert to_int_safe('3') == 3
    assert to_int_safe('2.6') == 3
    assert to_int_safe('x', -1) == -1
    assert number_to_string(1.23456789, 5) == '1.23457'
    assert number_to_string(2.0, 6) == '2'
    assert number_to_string(0.00001, 5, 0.00005) == '0'
    assert number_to_string(-0.0000001, 6) == '0'
    assert mass_error_to_string(-0.5) == '-0.5'
    assert mass_error_to_string(0.00005) == '0.00005'
    assert mass_error_to_string(1e-7) == '0'
    assert trim_zero_if_not_first_id(1, '0.0') == '0.0'
    assert trim_zero_if_not_first_id(2, '0.0') == '0'


def test_mod_description():
    modifications = [ { 'name': 'Phospho', 'position': 5 }, { 'name': 'Acetyl', 'position': 1 }, { 'name': 'Methyl', 'position': 1 } ]
    assert ResultsProcessorBase.get_mod_description(modifications) == 'Acetyl:1,Methyl:1,Phospho:5'
    assert ResultsProcessorBase.get_mod_description([]) == ''
